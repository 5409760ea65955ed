"""
Domain errors raised by the lifecycle engine and workflow gateway.
Each is local to one operation; none leaves an entity partially mutated.
"""
from __future__ import annotations

from typing import Any, Iterable


class LoanDeskError(Exception):
    """Base class; `extra` is merged into the API error body."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    @property
    def extra(self) -> dict[str, Any]:
        return {}


class ValidationError(LoanDeskError):
    """Malformed or out-of-range input. User-correctable, never retried."""


class NotFound(LoanDeskError):
    pass


class InvalidTransition(LoanDeskError):
    """Role/state mismatch for a requested transition."""


class IncompletePrerequisites(LoanDeskError):
    """A guard failed because of other entities; names them so a reviewer can act."""

    def __init__(self, detail: str, blocking_ids: Iterable[str]):
        super().__init__(detail)
        self.blocking_ids = list(blocking_ids)

    @property
    def extra(self) -> dict[str, Any]:
        return {"blockingDocumentIds": self.blocking_ids}


class UnknownPurpose(LoanDeskError):
    """No administrator entry and no default rate for this purpose."""

    def __init__(self, purpose: str):
        super().__init__(f"No interest rate configured for purpose '{purpose}'")
        self.purpose = purpose

    @property
    def extra(self) -> dict[str, Any]:
        return {"purpose": self.purpose}
