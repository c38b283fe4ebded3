from pybreaker import CircuitBreaker
from sqlalchemy.orm import Session

# Guards booking writes; only storage failures raised inside commit count.
booking_circuit_breaker = CircuitBreaker(
    fail_max=3,
    reset_timeout=60,
    name="booking_store_breaker",
)


def commit_booking(db: Session) -> None:
    booking_circuit_breaker.call(db.commit)
