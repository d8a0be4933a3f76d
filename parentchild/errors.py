""" Exception types raised by the parent/child data layer. SQLAlchemy errors are re-raised as
    one of these, with the original exception chained.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import exc

class ParentChildError(Exception):
    """ Base class for all errors raised by the parentchild library. """

class StoreConnectionError(ParentChildError, ConnectionError):
    """ The store file could not be opened, either because it does not exist or because it
        is not a SQLite database.
    """

class ConstraintViolation(ParentChildError):
    """ A write was rejected by a foreign key or NOT NULL constraint. """

class StatementError(ParentChildError):
    """ A statement was malformed or referenced a table that does not exist. """

@contextmanager
def translate_sql_errors(action: str) -> Iterator[None]:
    """ Re-raise SQLAlchemy errors from the wrapped block as library errors. Constraint
        failures become ConstraintViolation, anything else raised by the driver or by
        statement compilation becomes StatementError.

        Arguments:
        action -- a short description of the operation, used as the message prefix
    """

    try:
        yield
    except exc.IntegrityError as e:
        raise ConstraintViolation(f"{action} failed: {e.orig}") from e
    except (exc.StatementError, exc.NoSuchTableError, exc.CompileError) as e:
        raise StatementError(f"{action} failed: {getattr(e, 'orig', None) or e}") from e
