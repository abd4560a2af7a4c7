from __future__ import annotations


class OfferError(Exception):
    """Base class for bundle offer errors."""


class ValidationError(OfferError):
    """Raised when an offer group violates a structural rule. Always raised before any I/O."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFound(OfferError):
    """Raised when an update or delete references a group absent for that shop."""

    def __init__(self, shop: str, group_id: str) -> None:
        super().__init__(f"Offer group {group_id} not found for shop {shop}")
        self.shop = shop
        self.group_id = group_id


class StoreUnavailable(OfferError):
    """Raised when the record store cannot be reached or rejects a statement."""


class PublishFailure(OfferError):
    """Raised by publish channels; callers log it and carry on."""


class MalformedBlob(OfferError):
    """Raised when a published payload cannot be decoded on the storefront side."""


class UnreadableRecord(StoreUnavailable):
    """Raised when a stored row exists but cannot be loaded as an offer group."""

    def __init__(self, shop: str, group_id: str, reason: str) -> None:
        super().__init__(f"Offer group {group_id} for shop {shop} is unreadable: {reason}")
        self.shop = shop
        self.group_id = group_id
