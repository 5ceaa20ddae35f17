from __future__ import annotations

__all__ = ["InvalidInput"]


class InvalidInput(ValueError):
    """Raised when a field request carries a non-finite or out-of-domain argument.

    The request fails as a whole; no partial result is produced.
    """
