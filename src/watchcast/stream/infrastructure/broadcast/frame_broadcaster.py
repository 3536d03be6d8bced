import asyncio
import itertools
import logging
import threading
from collections import deque
from typing import Deque, Dict, List, Optional
from ...domain.entities import EncodedFrame
from ....common.exceptions import BroadcastClosed

logger = logging.getLogger(__name__)


class Subscriber:
    """
    One open viewer. Holds a bounded queue of pending frames.

    Frames are offered from the publisher thread and consumed either with
    `async for` on an event loop or with `drain()`. When the queue is full
    the oldest pending frame is discarded.
    """

    DROP_WARNING_EVERY = 30

    def __init__(self, subscriber_id: int, queue_size: int):
        self.id = subscriber_id
        self._frames: Deque[EncodedFrame] = deque(maxlen=queue_size)
        self._lock = threading.Lock()
        self._closed = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._wakeup: Optional[asyncio.Event] = None
        self.dropped_frames = 0

    @property
    def alive(self) -> bool:
        return not self._closed

    def offer(self, frame: EncodedFrame):
        """Queues a frame without blocking. Returns immediately if closed."""
        with self._lock:
            if self._closed:
                return
            if len(self._frames) == self._frames.maxlen:
                self.dropped_frames += 1
                if self.dropped_frames % self.DROP_WARNING_EVERY == 0:
                    logger.warning(
                        f"Viewer {self.id} is slow. Dropped {self.dropped_frames} frames so far."
                    )
            self._frames.append(frame)
        self._notify()

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._notify()

    def drain(self) -> List[EncodedFrame]:
        """Returns and removes every pending frame, oldest first."""
        with self._lock:
            frames = list(self._frames)
            self._frames.clear()
        return frames

    def _notify(self):
        with self._lock:
            loop, wakeup = self._loop, self._wakeup
        if loop is None:
            return
        try:
            loop.call_soon_threadsafe(wakeup.set)
        except RuntimeError:
            # Consumer loop already closed, nobody is listening.
            self.close()

    def __aiter__(self):
        return self

    async def __anext__(self) -> EncodedFrame:
        while True:
            with self._lock:
                if self._frames:
                    return self._frames.popleft()
                if self._closed:
                    raise StopAsyncIteration
                if self._loop is None:
                    self._loop = asyncio.get_running_loop()
                    self._wakeup = asyncio.Event()
                self._wakeup.clear()
            await self._wakeup.wait()


SubscriberHandle = Subscriber


class FrameBroadcaster:
    """
    Fan-out of encoded frames to every connected viewer.
    Thread-safe: the capture thread publishes while request handlers
    subscribe and unsubscribe from the event loop.
    """

    def __init__(self, queue_size: int = 4, replay_latest: bool = True):
        if queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        self.queue_size = queue_size
        self.replay_latest = replay_latest
        self._subscribers: Dict[int, Subscriber] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._latest: Optional[EncodedFrame] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def latest(self) -> Optional[EncodedFrame]:
        with self._lock:
            return self._latest

    def subscribe(self) -> SubscriberHandle:
        """
        Registers a viewer and returns its handle.
        The latest non-empty frame, if any, is queued right away.
        """
        with self._lock:
            if self._closed:
                raise BroadcastClosed("Broadcaster is closed")
            subscriber = Subscriber(next(self._ids), self.queue_size)
            # Queued under the lock so no later publish can overtake it
            if self.replay_latest and self._latest is not None:
                subscriber.offer(self._latest)
            self._subscribers[subscriber.id] = subscriber
            count = len(self._subscribers)

        logger.info(f"Viewer {subscriber.id} connected ({count} watching)")
        return subscriber

    def unsubscribe(self, handle: SubscriberHandle):
        """Removes a viewer. Calling it twice is harmless."""
        with self._lock:
            removed = self._subscribers.pop(handle.id, None)
            count = len(self._subscribers)
        handle.close()
        if removed is not None:
            logger.info(f"Viewer {handle.id} disconnected ({count} watching)")

    def demand_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, frame: EncodedFrame):
        """
        Replaces the current frame and offers it to every viewer.
        Never blocks on slow viewers.
        """
        with self._lock:
            if self._closed:
                raise BroadcastClosed("Broadcaster is closed")
            if not frame.is_empty:
                self._latest = frame
            subscribers = list(self._subscribers.values())

        for subscriber in subscribers:
            subscriber.offer(frame)

    def close(self):
        """Ends every viewer stream. Later publish/subscribe calls fail."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscribers = list(self._subscribers.values())
            self._subscribers.clear()

        for subscriber in subscribers:
            subscriber.close()
        logger.info(f"Broadcaster closed, {len(subscribers)} viewers released")
