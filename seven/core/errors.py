from __future__ import annotations

MALFORMED_IDENTITY = "malformed identity"
EMPTY_ADDRESS = "empty address"


class ValidationError(ValueError):
    """A registration was rejected before it reached the store."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


__all__ = ["ValidationError", "MALFORMED_IDENTITY", "EMPTY_ADDRESS"]
