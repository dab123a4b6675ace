from __future__ import annotations

import string
import uuid
from dataclasses import dataclass, field, replace

from .errors import MALFORMED_IDENTITY, ValidationError
from .proto import PeerForm, now_ms

_HEXDIGITS = frozenset(string.hexdigits)
_URN_PREFIX = "urn:uuid:"
_HYPHEN_OFFSETS = (8, 13, 18, 23)


@dataclass(frozen=True)
class PeerEntry:
    """One registered peer. Immutable; a refresh stores a new instance."""

    identity: uuid.UUID
    address: str
    last_seen_ms: int = field(default_factory=now_ms)

    def refreshed(self, address: str, now: int) -> "PeerEntry":
        return replace(self, address=address, last_seen_ms=now)

    def to_form(self) -> PeerForm:
        return PeerForm(identity=str(self.identity), address=self.address)


def parse_identity(text: object) -> uuid.UUID:
    """Parse the textual form of a 128-bit identity.

    Accepted spellings::

        xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx
        {xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx}
        urn:uuid:xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx
        xxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx

    Anything else raises ValidationError("malformed identity").
    """

    if not isinstance(text, str):
        raise ValidationError(MALFORMED_IDENTITY)

    size = len(text)
    if size == 32:
        return _from_hex(text)
    if size == 36:
        body = text
    elif size == 38:
        if text[0] != "{" or text[-1] != "}":
            raise ValidationError(MALFORMED_IDENTITY)
        body = text[1:-1]
    elif size == 45:
        if text[: len(_URN_PREFIX)].lower() != _URN_PREFIX:
            raise ValidationError(MALFORMED_IDENTITY)
        body = text[len(_URN_PREFIX):]
    else:
        raise ValidationError(MALFORMED_IDENTITY)

    if any(body[i] != "-" for i in _HYPHEN_OFFSETS):
        raise ValidationError(MALFORMED_IDENTITY)
    return _from_hex(body.replace("-", ""))


def _from_hex(digits: str) -> uuid.UUID:
    if len(digits) != 32 or not all(c in _HEXDIGITS for c in digits):
        raise ValidationError(MALFORMED_IDENTITY)
    return uuid.UUID(hex=digits)


__all__ = ["PeerEntry", "parse_identity"]
