"""In-process message queue with one buffered channel per stream."""

from __future__ import annotations

import logging
import queue
import threading
import time
import uuid

from admincore.storage.message import Message
from admincore.storage.types import AdapterQueue, ConsumerFunc

_log = logging.getLogger(__name__)

_MAX_RETRIES = 3
_POLL_INTERVAL = 0.1


class MemoryQueue(AdapterQueue):
    """A queue held in memory; each stream is served by its consumers' threads.

    A consumer that raises has the message handed back to the stream up to
    three times, waiting ``retry_delay`` seconds times the error count first.
    """

    name = "memory"

    def __init__(self, pool_num: int = 0, retry_delay: float = 1.0) -> None:
        self.pool_num = pool_num
        self._retry_delay = retry_delay
        self._queues: dict[str, queue.Queue[Message]] = {}
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    def _queue_for(self, stream: str) -> queue.Queue[Message]:
        with self._lock:
            channel = self._queues.get(stream)
            if channel is None:
                channel = queue.Queue(maxsize=max(self.pool_num, 0))
                self._queues[stream] = channel
            return channel

    def append(self, message: Message) -> None:
        """Publish a copy of ``message`` under a fresh id to its stream."""
        copy = Message(id=message.id, stream=message.stream, values=message.values)
        channel = self._queue_for(message.stream)

        def deliver() -> None:
            copy.id = str(uuid.uuid4())
            channel.put(copy)

        threading.Thread(target=deliver, daemon=True).start()

    def register(self, name: str, consumer: ConsumerFunc) -> None:
        """Start a thread feeding the messages of stream ``name`` to ``consumer``."""
        channel = self._queue_for(name)

        def consume() -> None:
            while not self._stopped.is_set():
                try:
                    message = channel.get(timeout=_POLL_INTERVAL)
                except queue.Empty:
                    continue
                try:
                    consumer(message)
                except Exception:  # noqa: BLE001 - a failing consumer triggers a retry
                    _log.debug("consumer for %s failed", name, exc_info=True)
                    if message.error_count < _MAX_RETRIES:
                        message.error_count += 1
                        time.sleep(self._retry_delay * message.error_count)
                        channel.put(message)

        threading.Thread(target=consume, name=f"queue-{name}", daemon=True).start()

    def run(self) -> None:
        """Block until :meth:`shutdown` is called."""
        self._stopped.wait()

    def shutdown(self) -> None:
        """Release :meth:`run` and stop the consumer threads."""
        self._stopped.set()