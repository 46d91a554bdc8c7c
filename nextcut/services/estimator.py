"""
Wait-Time Estimator
===================

Turns a queue position into an expected wait. Stateless; the per-customer
duration is policy and is passed in by the caller (the barber's own value or
``settings.minutes_per_customer``).

    estimate_wait_minutes(position=1, per_customer_minutes=15)  # 0, you're next
    estimate_wait_minutes(position=4, per_customer_minutes=15)  # 45
"""

from nextcut.core.exceptions import InvalidArgumentError


def estimate_wait_minutes(position: int, per_customer_minutes: int) -> int:
    """Minutes until service for the customer at 1-based ``position``."""
    if position < 1:
        raise InvalidArgumentError(f"Position must be >= 1, got {position}",
                                   {"position": position})
    if per_customer_minutes < 0:
        raise InvalidArgumentError(
            f"Per-customer minutes must be >= 0, got {per_customer_minutes}",
            {"per_customer_minutes": per_customer_minutes},
        )
    return (position - 1) * per_customer_minutes


def estimate_for_new_arrival(queue_length: int, per_customer_minutes: int) -> int:
    """Wait for someone who would join a line of ``queue_length`` right now."""
    return estimate_wait_minutes(queue_length + 1, per_customer_minutes)
