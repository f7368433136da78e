from __future__ import annotations

from typing import Any


class EngineError(Exception):
    """Base class for every error the engine raises on purpose.

    The caller's transport layer decides how to present these (e.g. 400/404/409);
    the engine only guarantees the class identifies the violated contract.
    """

    code = "engine_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class ValidationError(EngineError):
    """Malformed input. Always fixable by the caller."""

    code = "validation_error"


class InvalidStateError(EngineError):
    """Operation is not allowed from the entity's current state (stale view)."""

    code = "invalid_state"


class ConflictError(EngineError):
    """Business-rule conflict; the caller has to change intent."""

    code = "conflict"


class NotFoundError(EngineError):
    code = "not_found"
