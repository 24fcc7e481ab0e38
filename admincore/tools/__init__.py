"""Helpers for Accept-Language parsing, search conditions, spreadsheet column names and request ids."""