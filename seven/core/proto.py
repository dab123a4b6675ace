from __future__ import annotations

import time
from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Registration frames (carried over the /register websocket)
# ---------------------------------------------------------------------------

class PeerForm(BaseModel):
    """Public representation of a peer: identity text and contact address.

    Used both for incoming registration frames and for the entries handed
    back to a registering peer. The last-seen timestamp is never part of it.
    """

    identity: str = Field(alias="uuid")
    address: str = Field(alias="addr")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def as_wire(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


STATUS_OK = "ok"
STATUS_BAD_JSON = "error parsing json"
STATUS_NOT_ACCEPTABLE = "not acceptable"

# HTTP-equivalent codes reported alongside each status
STATUS_CODES = {
    STATUS_OK: 200,
    STATUS_BAD_JSON: 406,
    STATUS_NOT_ACCEPTABLE: 406,
}


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def now_ms() -> int:
    """Milliseconds since the Unix epoch."""

    return int(time.time() * 1000)


def parse_register_frame(raw: str | bytes) -> PeerForm:
    """Decode one registration frame; raises pydantic.ValidationError."""

    return PeerForm.model_validate_json(raw)


def build_response(status: str, *, entries: Optional[Iterable[PeerForm]] = None, detail: str | None = None) -> Dict[str, Any]:
    if status not in STATUS_CODES:
        raise ValueError(f"unknown status: {status}")
    frame: Dict[str, Any] = {"status": status, "code": STATUS_CODES[status]}
    if entries is not None:
        frame["entries"] = [form.as_wire() for form in entries]
    if detail:
        frame["detail"] = detail
    return frame


__all__ = [
    "PeerForm",
    "STATUS_OK",
    "STATUS_BAD_JSON",
    "STATUS_NOT_ACCEPTABLE",
    "STATUS_CODES",
    "now_ms",
    "parse_register_frame",
    "build_response",
]
