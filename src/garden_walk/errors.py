"""Exception hierarchy for acquisition and rendering failures."""

from __future__ import annotations

#: Max characters of an unusable response body echoed into error messages.
BODY_EXCERPT_CHARS = 400


def excerpt(text: str, limit: int = BODY_EXCERPT_CHARS) -> str:
    """Shorten a response body for inclusion in an error message."""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class GardenError(Exception):
    """Base class for all garden-walk errors."""


class TransportError(GardenError):
    """The export could not be fetched.

    ``reason`` is one of ``timeout``, ``http-status:<code>``, ``load-error``
    or ``parse-error``.
    """

    def __init__(self, reason: str, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class FormatError(TransportError):
    """A response arrived but its body is not JSON."""

    def __init__(self, detail: str = "") -> None:
        super().__init__("parse-error", detail)


class PayloadValidationError(GardenError):
    """The payload parsed but declares failure or has no row collection."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class RenderPreconditionError(GardenError):
    """Rendering was requested without a mount point."""
