"""Building blocks for admin back ends: storage, service runners, query tools and logging helpers."""

__version__ = "0.1.0"