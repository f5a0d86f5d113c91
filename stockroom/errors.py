from __future__ import annotations

FOREIGN_KEY_CONSTRAINT = "FOREIGN_KEY_CONSTRAINT"


class StockroomError(Exception):
    code: str = "STOCKROOM_ERROR"


class ForeignKeyConstraintError(StockroomError):
    """Raised when a record cannot be deleted because other data still uses it."""

    code: str = FOREIGN_KEY_CONSTRAINT

    def __init__(self, message: str = "Cannot delete: record is still in use") -> None:
        super().__init__(message)
