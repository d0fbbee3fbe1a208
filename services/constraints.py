"""
Constraint violations raised by the database, sorted into three kinds:
duplicate key, NOT NULL and CHECK.
"""
from enum import Enum
from typing import Optional

from sqlalchemy.exc import IntegrityError


class ViolationKind(str, Enum):
    DUPLICATE_KEY = "duplicate_key"
    NOT_NULL = "not_null"
    CHECK = "check"


class ConstraintViolation(Exception):
    kind: ViolationKind = None

    def __init__(self, message: str, statement_index: Optional[int] = None, sql: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.statement_index = statement_index
        self.sql = sql

    def __repr__(self):
        return f"{type(self).__name__}(kind={self.kind.value!r}, statement_index={self.statement_index!r})"


class DuplicateKey(ConstraintViolation):
    kind = ViolationKind.DUPLICATE_KEY


class NotNullViolation(ConstraintViolation):
    kind = ViolationKind.NOT_NULL


class CheckViolation(ConstraintViolation):
    kind = ViolationKind.CHECK


VIOLATION_CLASSES = {
    ViolationKind.DUPLICATE_KEY: DuplicateKey,
    ViolationKind.NOT_NULL: NotNullViolation,
    ViolationKind.CHECK: CheckViolation,
}

# SQLSTATE (Postgres psycopg2 -> pgcode, psycopg 3 -> sqlstate)
SQLSTATE_KINDS = {
    "23505": ViolationKind.DUPLICATE_KEY,
    "23502": ViolationKind.NOT_NULL,
    "23514": ViolationKind.CHECK,
}

# MySQL / MariaDB error numbers
MYSQL_ERRNO_KINDS = {
    1062: ViolationKind.DUPLICATE_KEY,
    1048: ViolationKind.NOT_NULL,
    3819: ViolationKind.CHECK,
}

# Message text fallback, checked in order (SQLite has no error codes here)
MESSAGE_KINDS = [
    ("unique constraint failed", ViolationKind.DUPLICATE_KEY),
    ("duplicate key", ViolationKind.DUPLICATE_KEY),
    ("duplicate entry", ViolationKind.DUPLICATE_KEY),
    ("not null constraint failed", ViolationKind.NOT_NULL),
    ("null value in column", ViolationKind.NOT_NULL),
    ("cannot be null", ViolationKind.NOT_NULL),
    ("check constraint", ViolationKind.CHECK),
]


def violation_kind(exc: IntegrityError) -> Optional[ViolationKind]:
    orig = getattr(exc, "orig", None)

    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in SQLSTATE_KINDS:
        return SQLSTATE_KINDS[sqlstate]

    args = getattr(orig, "args", None) or ()
    if args and isinstance(args[0], int) and args[0] in MYSQL_ERRNO_KINDS:
        return MYSQL_ERRNO_KINDS[args[0]]

    text = str(orig if orig is not None else exc).lower()
    for needle, kind in MESSAGE_KINDS:
        if needle in text:
            return kind
    return None


def classify_integrity_error(
    exc: IntegrityError, statement_index: Optional[int] = None, sql: Optional[str] = None
) -> Optional[ConstraintViolation]:
    """Map a driver IntegrityError to a ConstraintViolation, or None if it is some other kind (e.g. foreign key)."""
    kind = violation_kind(exc)
    if kind is None:
        return None
    message = str(getattr(exc, "orig", None) or exc)
    return VIOLATION_CLASSES[kind](message, statement_index=statement_index, sql=sql)
