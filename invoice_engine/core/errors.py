# invoice_engine/core/errors.py

from typing import Optional


class InvalidAmount(ValueError):
    """
    Raised when a negative, non-finite or non-numeric quantity, price, rate
    or charge reaches the arithmetic layer.
    """


class InvalidPayment(ValueError):
    """Raised when purchase payment details do not add up against the payable amount."""


class RenderFailure(RuntimeError):
    """
    Raised when both the primary and the fallback PDF emission failed.
    The underlying exception is kept on `cause` (and chained via `raise ... from`).
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class AssetLoadFailure(RuntimeError):
    """Raised when a required static image (logo, icons, glyphs, signatures) cannot be loaded."""
