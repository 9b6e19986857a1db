from pybreaker import CircuitBreaker
from sqlalchemy.exc import IntegrityError

from .config import settings

# Guards every commit made through the record store. Constraint violations
# are answers from a healthy database, not failures, so they do not count.
store_circuit_breaker = CircuitBreaker(
    fail_max=settings.BREAKER_FAIL_MAX,
    reset_timeout=settings.BREAKER_RESET_TIMEOUT,
    exclude=[IntegrityError],
    name="record_store_breaker",
)
