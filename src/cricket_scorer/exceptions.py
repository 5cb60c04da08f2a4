"""Error taxonomy for scoring operations.

Every error is raised before the transaction commits, so a failed
operation never leaves partial state behind.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Generator, Type, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

E = TypeVar("E", bound=Enum)


class ScoringError(Exception):
    """Base class for all scoring errors."""
    pass


class ValidationError(ScoringError):
    """Operation rejected by the current match or innings state."""
    pass


class AuthorizationError(ScoringError):
    """Caller does not hold scoring rights for the match."""
    pass


class NotFoundError(ScoringError):
    """Referenced match, innings, player, transfer or ball does not exist."""
    pass


class ConsistencyError(ScoringError):
    """Ledger and derived counters disagree; the operation is aborted."""
    pass


class TransientStoreError(ScoringError):
    """Store unavailable. Safe to retry only if no prior success was observed."""
    pass


@contextmanager
def translate_store_errors() -> Generator[None, None, None]:
    """Map SQLAlchemy failures onto the scoring taxonomy."""
    try:
        yield
    except (IntegrityError, StaleDataError) as e:
        raise ConsistencyError(f"Concurrent or conflicting write detected: {e}") from e
    except OperationalError as e:
        raise TransientStoreError(f"Store unavailable: {e}") from e


def parse_choice(enum_cls: Type[E], value, what: str) -> E:
    """Coerce a caller-supplied value into ``enum_cls`` or raise ``ValidationError``."""
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {what} {value!r}; expected one of {choices}") from None
