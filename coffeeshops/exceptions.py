from __future__ import annotations


class CoffeeShopsError(Exception):
    """Base class for errors raised by the directory core."""


class ShopNotFoundError(CoffeeShopsError, LookupError):
    """Raised when a review is submitted for a shop that is not in the catalog."""


class DuplicateShopError(CoffeeShopsError, ValueError):
    """Raised when a catalog source repeats a shop id."""


class ReviewValidationError(CoffeeShopsError, ValueError):
    """A submitted review failed validation.

    ``reasons`` holds one human-readable message per failed field.
    """

    def __init__(self, reasons: list[str]) -> None:
        self.reasons = list(reasons)
        super().__init__("; ".join(self.reasons) or "Invalid review")
