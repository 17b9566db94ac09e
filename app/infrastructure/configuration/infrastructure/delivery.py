"""Delivery worker infrastructure settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import InfrastructureSettings

OVERFLOW_POLICIES = {"unbounded", "block", "drop_oldest", "drop_newest"}


class DeliverySettings(InfrastructureSettings):
    """Background delivery queue configuration.

    Controls the queue that sits between webhook handling and the outbound
    Slack calls, and the retry policy applied to failed calls.

    Environment Variables:
        DELIVERY_QUEUE_SIZE: Capacity for bounded overflow policies (default: 1000)
        DELIVERY_OVERFLOW_POLICY: 'unbounded', 'block', 'drop_oldest' or 'drop_newest'
        DELIVERY_ENQUEUE_TIMEOUT_SECONDS: Max wait when the policy is 'block'
        DELIVERY_MAX_ATTEMPTS: Attempts per request before giving up (default: 3)
        DELIVERY_BASE_DELAY_SECONDS: Base exponential backoff delay (default: 1s)
        DELIVERY_MAX_DELAY_SECONDS: Maximum backoff delay (default: 30s)

    Exponential Backoff:
        Delay calculation: min(base_delay * 2^(attempt - 1), max_delay)
        A Slack Retry-After header replaces the computed delay (still capped).
    """

    queue_size: int = Field(
        default=1000,
        alias="DELIVERY_QUEUE_SIZE",
        description="Queue capacity used by bounded overflow policies",
    )
    overflow_policy: str = Field(
        default="unbounded",
        alias="DELIVERY_OVERFLOW_POLICY",
        description="Backpressure strategy when the queue is full",
    )
    enqueue_timeout_seconds: float = Field(
        default=1.0,
        alias="DELIVERY_ENQUEUE_TIMEOUT_SECONDS",
        description="Longest a producer waits for space under the 'block' policy",
    )
    max_attempts: int = Field(
        default=3,
        alias="DELIVERY_MAX_ATTEMPTS",
        description="Maximum delivery attempts per request",
    )
    base_delay_seconds: float = Field(
        default=1.0,
        alias="DELIVERY_BASE_DELAY_SECONDS",
        description="Base delay for exponential backoff (seconds)",
    )
    max_delay_seconds: float = Field(
        default=30.0,
        alias="DELIVERY_MAX_DELAY_SECONDS",
        description="Maximum delay for exponential backoff (seconds)",
    )

    @field_validator("overflow_policy")
    @classmethod
    def validate_overflow_policy(cls, v: str) -> str:
        """Normalize and validate the overflow policy name."""
        value = v.strip().lower()
        if value not in OVERFLOW_POLICIES:
            raise ValueError(
                f"DELIVERY_OVERFLOW_POLICY must be one of {sorted(OVERFLOW_POLICIES)}"
            )
        return value
