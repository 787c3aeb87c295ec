from __future__ import annotations

import logging
import queue
import threading
from typing import Optional

from ..core.exceptions import NotificationDeliveryFailure
from .model import PushMessage
from .provider import NotificationProvider

logger = logging.getLogger(__name__)


class NotificationOutbox:
    """Bounded queue between the workflows and the delivery worker.

    Enqueueing never waits; a full queue is the only failure callers see.
    """

    def __init__(self, *, maxsize: int = 1000):
        self._queue: "queue.Queue[PushMessage]" = queue.Queue(maxsize=int(maxsize))

    def enqueue(self, message: PushMessage) -> None:
        if not message.tokens:
            return
        try:
            self._queue.put_nowait(message)
        except queue.Full:
            raise NotificationDeliveryFailure("Notification queue is full")

    def get(self, timeout: Optional[float] = None) -> Optional[PushMessage]:
        try:
            return self._queue.get(timeout=timeout) if timeout else self._queue.get_nowait()
        except queue.Empty:
            return None

    def task_done(self) -> None:
        self._queue.task_done()

    def join(self) -> None:
        """Block until every enqueued message has been processed."""
        self._queue.join()

    def __len__(self) -> int:
        return self._queue.qsize()


class NotificationWorker(threading.Thread):
    """Drains the outbox into the provider; delivery failures are logged only."""

    def __init__(self, outbox: NotificationOutbox, provider: NotificationProvider, *, poll_timeout: float = 0.5):
        super().__init__(name="notification-worker", daemon=True)
        self._outbox = outbox
        self._provider = provider
        self._poll_timeout = poll_timeout
        self._stopped = threading.Event()

    def deliver(self, message: PushMessage) -> bool:
        try:
            if message.is_bulk:
                self._provider.send_bulk(list(message.tokens), message.title, message.body, message.data)
            else:
                self._provider.send(message.tokens[0], message.title, message.body, message.data)
        except NotificationDeliveryFailure as e:
            logger.warning("Push '%s' to %d device(s) failed: %s", message.title, len(message.tokens), e)
            return False
        return True

    def drain(self) -> int:
        """Deliver everything queued right now on the calling thread. Returns messages delivered."""
        delivered = 0
        while True:
            message = self._outbox.get()
            if message is None:
                return delivered
            try:
                delivered += int(self.deliver(message))
            finally:
                self._outbox.task_done()

    def run(self) -> None:
        while not self._stopped.is_set():
            message = self._outbox.get(timeout=self._poll_timeout)
            if message is None:
                continue
            try:
                self.deliver(message)
            except Exception:
                logger.exception("Unexpected error delivering push '%s'", message.title)
            finally:
                self._outbox.task_done()

    def stop(self, *, timeout: Optional[float] = None) -> None:
        self._stopped.set()
        if self.is_alive():
            self.join(timeout)
