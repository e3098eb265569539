"""
bulk/errors.py

Structural failures raised by the bulk transfer engine.

Row-level validation problems are never raised; they are returned as data on
:class:`bulk.types.BatchResult`. The exceptions below signal that a batch
could not even be attempted.
"""

from __future__ import annotations

from typing import Any, Sequence


class BulkTransferError(ValueError):
    """
    Base class for failures that prevent a bulk operation from running.
    """

    code: str = "bulk_transfer_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class UnsupportedEntityError(BulkTransferError):
    """
    Raised when the requested entity kind is not part of the closed set.
    """

    code = "unsupported_entity"

    def __init__(self, entity: object, valid_options: Sequence[str]) -> None:
        valid = ", ".join(valid_options)
        super().__init__(f"Unsupported entity type: {entity!s}. Valid options: {valid}")
        self.entity = entity
        self.valid_options = tuple(valid_options)


class MalformedInputError(BulkTransferError):
    """
    Raised when the import payload cannot be read as UTF-8 text.
    """

    code = "malformed_input"
