"""Background delivery worker.

Decouples webhook handling from outbound Slack calls. Producers (one per
inbound request) call ``accept()``, which only enqueues; a dedicated consumer
thread makes the actual calls, retries transient failures and logs the rest.

Usage Example:
    from infrastructure.notifications import (
        DeliveryConfig,
        QueuedDeliveryWorker,
        SlackChatClient,
    )

    worker = QueuedDeliveryWorker(SlackChatClient(), DeliveryConfig())
    worker.start()
    worker.accept(request)   # returns immediately
    ...
    worker.stop(drain=True)
"""

import threading
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, Optional, Protocol

import structlog
from infrastructure.configuration import DeliverySettings
from infrastructure.notifications.channels.base import ChatClient
from infrastructure.notifications.models import DeliveryRequest
from infrastructure.operations import OperationResult

logger = structlog.get_logger()


class OverflowPolicy(Enum):
    """What ``accept()`` does when a bounded queue is full.

    UNBOUNDED never fills up (memory grows during a long Slack outage).
    BLOCK waits for space up to the enqueue timeout, then drops the offer.
    DROP_OLDEST evicts the oldest queued request to make room.
    DROP_NEWEST refuses the offered request.
    """

    UNBOUNDED = "unbounded"
    BLOCK = "block"
    DROP_OLDEST = "drop_oldest"
    DROP_NEWEST = "drop_newest"


@dataclass
class DeliveryConfig:
    """Configuration for the delivery worker.

    Attributes:
        queue_size: Capacity used by the bounded overflow policies
        overflow_policy: Backpressure strategy
        enqueue_timeout_seconds: Longest wait in accept() under BLOCK
        max_attempts: Attempts per request, first one included
        base_delay_seconds: Base delay for exponential backoff
        max_delay_seconds: Cap for any delay between attempts

    Example:
        config = DeliveryConfig(
            queue_size=100,
            overflow_policy=OverflowPolicy.DROP_OLDEST,
        )
    """

    queue_size: int = 1000
    overflow_policy: OverflowPolicy = OverflowPolicy.UNBOUNDED
    enqueue_timeout_seconds: float = 1.0
    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must not be negative")
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError("max_delay_seconds must be >= base_delay_seconds")

    @classmethod
    def from_settings(cls, settings: DeliverySettings) -> "DeliveryConfig":
        """Build a DeliveryConfig from environment-backed settings."""
        return cls(
            queue_size=settings.queue_size,
            overflow_policy=OverflowPolicy(settings.overflow_policy),
            enqueue_timeout_seconds=settings.enqueue_timeout_seconds,
            max_attempts=settings.max_attempts,
            base_delay_seconds=settings.base_delay_seconds,
            max_delay_seconds=settings.max_delay_seconds,
        )


class DeliveryWorker(Protocol):
    """Anything that accepts delivery requests without waiting on delivery."""

    def accept(self, request: DeliveryRequest) -> bool:
        """Queue a request for delivery.

        Returns:
            True if the request was queued, False if it was refused or dropped
        """
        ...


class QueuedDeliveryWorker:
    """Single-consumer queue in front of a ChatClient.

    One consumer thread takes requests in acceptance order, so requests for
    the same recipient are attempted in the order they were accepted. Any
    number of producer threads may call ``accept()`` concurrently.

    Attributes:
        client: Outbound ChatClient
        config: DeliveryConfig controlling backpressure and retries
    """

    def __init__(
        self,
        client: ChatClient,
        config: Optional[DeliveryConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        name: str = "delivery-worker",
    ) -> None:
        """Initialize the worker. Call ``start()`` before accepting requests.

        Args:
            client: ChatClient used for every attempt
            config: Optional DeliveryConfig. If not provided, uses defaults.
            sleep: Function used to wait between attempts
            name: Consumer thread name
        """
        self.client = client
        self.config = config or DeliveryConfig()
        self.name = name
        self._sleep = sleep
        self._queue: Deque[DeliveryRequest] = deque()
        self._cond = threading.Condition()
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._stopping = False
        self._drain = True
        self._in_flight = 0
        self.log = logger.bind(component="delivery_worker", worker=name)

    @property
    def is_running(self) -> bool:
        """True between start() and stop()."""
        return self._running and not self._stopping

    @property
    def pending(self) -> int:
        """Number of queued requests not yet picked up."""
        with self._cond:
            return len(self._queue)

    def start(self) -> None:
        """Start the consumer thread. Calling it twice is a no-op.

        Refused while a consumer from an earlier ``stop()`` is still running,
        so there is never more than one consumer.
        """
        with self._cond:
            previous = self._thread
            if previous is not None and previous.is_alive():
                if self._stopping:
                    self.log.warning(
                        "delivery_worker_start_refused",
                        reason="previous consumer still stopping",
                        pending=len(self._queue),
                    )
                return
            self._running = True
            self._stopping = False
            self._thread = threading.Thread(
                target=self._run, name=self.name, daemon=True
            )
            self._thread.start()
        self.log.info(
            "delivery_worker_started",
            overflow_policy=self.config.overflow_policy.value,
            queue_size=self.config.queue_size,
            max_attempts=self.config.max_attempts,
        )

    def stop(self, drain: bool = True, timeout: Optional[float] = None) -> None:
        """Stop the consumer thread.

        Args:
            drain: Deliver everything already queued before stopping
            timeout: Maximum seconds to wait for the thread to finish

        If the thread is still busy when the timeout expires the worker stays
        in the stopping state and refuses ``start()``; call ``stop()`` again to
        finish.
        """
        with self._cond:
            if not self._running:
                return
            self._stopping = True
            self._drain = drain
            if not drain and self._queue:
                self.log.warning(
                    "delivery_queue_discarded_on_stop",
                    discarded=len(self._queue),
                )
                self._queue.clear()
            self._cond.notify_all()
            thread = self._thread

        if thread is not None:
            thread.join(timeout)

        with self._cond:
            if thread is not None and thread.is_alive():
                self.log.warning(
                    "delivery_worker_stop_timed_out",
                    timeout=timeout,
                    pending=len(self._queue),
                )
                return
            self._running = False
            self._thread = None
        self.log.info("delivery_worker_stopped", drain=drain)

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait until the queue is empty and no attempt is in progress.

        Args:
            timeout: Maximum seconds to wait

        Returns:
            True if the worker became idle, False on timeout
        """
        with self._cond:
            return self._cond.wait_for(
                lambda: not self._queue and self._in_flight == 0, timeout
            )

    def accept(self, request: DeliveryRequest) -> bool:
        """Queue a request for delivery without waiting for the outbound call.

        Only the BLOCK policy may wait, and never longer than the
        configured enqueue timeout.

        Args:
            request: DeliveryRequest to deliver

        Returns:
            True if queued, False if the worker is stopped or the request
            was dropped by the overflow policy
        """
        with self._cond:
            if not self._running or self._stopping:
                self.log.error(
                    "delivery_worker_unavailable",
                    recipient=request.recipient.key,
                )
                return False

            if self._is_full() and not self._make_room(request):
                return False

            self._queue.append(request)
            self._cond.notify_all()
            return True

    def _is_full(self) -> bool:
        if self.config.overflow_policy is OverflowPolicy.UNBOUNDED:
            return False
        return len(self._queue) >= self.config.queue_size

    def _make_room(self, request: DeliveryRequest) -> bool:
        """Apply the overflow policy to a full queue. Caller holds the lock."""
        policy = self.config.overflow_policy

        if policy is OverflowPolicy.DROP_OLDEST:
            dropped = self._queue.popleft()
            self.log.warning(
                "delivery_queue_full_dropped_oldest",
                dropped_recipient=dropped.recipient.key,
                queue_size=self.config.queue_size,
            )
            return True

        if policy is OverflowPolicy.BLOCK:
            has_room = self._cond.wait_for(
                lambda: not self._is_full() or self._stopping,
                self.config.enqueue_timeout_seconds,
            )
            if has_room and not self._stopping:
                return True

        self.log.warning(
            "delivery_queue_full_dropped_newest",
            recipient=request.recipient.key,
            overflow_policy=policy.value,
            queue_size=self.config.queue_size,
        )
        return False

    def _run(self) -> None:
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._queue or self._stopping)
                if not self._queue or (self._stopping and not self._drain):
                    break
                request = self._queue.popleft()
                self._in_flight += 1
                self._cond.notify_all()

            try:
                self._deliver(request)
            except Exception as e:  # pylint: disable=broad-except
                self.log.exception(
                    "delivery_unexpected_error",
                    recipient=request.recipient.key,
                    error=str(e),
                )
            finally:
                with self._cond:
                    self._in_flight -= 1
                    self._cond.notify_all()

    def _deliver(self, request: DeliveryRequest) -> bool:
        """Attempt a request until it succeeds, fails permanently, or runs out of attempts."""
        recipient = request.recipient.key
        result: Optional[OperationResult] = None

        for attempt in range(1, self.config.max_attempts + 1):
            try:
                result = self.client.send(request)
            except Exception as e:  # pylint: disable=broad-except
                self.log.error(
                    "delivery_client_exception",
                    recipient=recipient,
                    attempt=attempt,
                    error=str(e),
                    exc_info=True,
                )
                result = OperationResult.transient_error(
                    f"Client exception: {str(e)}", error_code="CLIENT_EXCEPTION"
                )

            if result.is_success:
                self.log.info("delivery_sent", recipient=recipient, attempt=attempt)
                return True

            if not result.is_retryable:
                self.log.error(
                    "delivery_failed_permanently",
                    recipient=recipient,
                    attempt=attempt,
                    error=result.message,
                    error_code=result.error_code,
                )
                return False

            if attempt < self.config.max_attempts:
                delay = self._retry_delay(attempt, result.retry_after)
                self.log.warning(
                    "delivery_retry",
                    recipient=recipient,
                    attempt=attempt,
                    error=result.message,
                    delay=delay,
                )
                self._sleep(delay)

        self.log.error(
            "delivery_attempts_exhausted",
            recipient=recipient,
            attempts=self.config.max_attempts,
            error=result.message if result else None,
        )
        return False

    def _retry_delay(self, attempt: int, retry_after: Optional[int]) -> float:
        if retry_after is not None:
            return float(min(retry_after, self.config.max_delay_seconds))
        return min(
            self.config.base_delay_seconds * (2 ** (attempt - 1)),
            self.config.max_delay_seconds,
        )
