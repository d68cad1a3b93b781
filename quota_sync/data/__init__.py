"""Data layer - models, quantity normalization, and the event publisher."""

from .models import (
    BusinessType,
    Event,
    EventAction,
    QuotaSnapshot,
    Session,
    SkippedPair,
    SyncResult,
    TokenResponse,
    WorkspacePlacement,
)
from .normalization import fallback_used, normalize_quota, resource_list_to_strings
from .publisher import EventPublisher, PublishError
from .quantity import Quantity, QuantityError, canonical_quantity, parse_quantity

__all__ = [
    "BusinessType",
    "Event",
    "EventAction",
    "QuotaSnapshot",
    "Session",
    "SkippedPair",
    "SyncResult",
    "TokenResponse",
    "WorkspacePlacement",
    "fallback_used",
    "normalize_quota",
    "resource_list_to_strings",
    "EventPublisher",
    "PublishError",
    "Quantity",
    "QuantityError",
    "canonical_quantity",
    "parse_quantity",
]
