"""Resource quota normalization.

This module turns a decoded KubeSphere ``ResourceQuota`` object into the two
string-keyed maps published with every event.

Key normalizations:
1. Resource lists → {resource name: canonical quantity string}
2. Missing aggregated usage → declared hard limits plus a zero "used" map
3. Live aggregated usage → status.total hard/used maps as reported
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from .quantity import canonical_quantity

DEFAULT_STORAGE_CLASS = "huawei-fusionstorage"

# Resource keys reported as "0" until the control plane aggregates usage
FALLBACK_USED_KEYS = (
    "requests.cpu",
    "limits.cpu",
    "requests.memory",
    "limits.memory",
)


class QuotaShapeError(ValueError):
    """Raised when a resource quota object does not have the expected shape."""


def storage_class_quota_key(storage_class: str) -> str:
    """Quota key for requested storage on a storage class.

    >>> storage_class_quota_key("fast")
    'fast.storageclass.storage.k8s.io/requests.storage'
    """
    return f"{storage_class}.storageclass.storage.k8s.io/requests.storage"


def fallback_used(storage_class: str = DEFAULT_STORAGE_CLASS) -> Dict[str, str]:
    """Zero-valued usage map for quotas without aggregated status."""
    used = {key: "0" for key in FALLBACK_USED_KEYS}
    used[storage_class_quota_key(storage_class)] = "0"
    return used


def resource_list_to_strings(resource_list: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Convert a resource list into {name: canonical quantity string}.

    Args:
        resource_list: Mapping of resource name to quantity (string or number),
            or None

    Returns:
        New dict with one entry per resource name

    Raises:
        QuotaShapeError: If the list is not a mapping
        QuantityError: If a value is not a valid quantity
    """
    if resource_list is None:
        return {}
    if not isinstance(resource_list, Mapping):
        raise QuotaShapeError(
            f"Expected a resource list mapping, got {type(resource_list).__name__}"
        )
    return {str(name): canonical_quantity(qty) for name, qty in resource_list.items()}


def _section(obj: Mapping[str, Any], key: str, where: str) -> Mapping[str, Any]:
    """Return obj[key] as a mapping; missing or null gives an empty mapping."""
    value = obj.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise QuotaShapeError(f"Expected '{where}' to be an object, got {type(value).__name__}")
    return value


def is_zero_total(total: Optional[Mapping[str, Any]]) -> bool:
    """Check whether status.total carries no aggregated data.

    An absent or null total, or one whose hard and used lists are both
    missing or empty, counts as not yet reported.

    This differs from a strict zero-value comparison of the status struct,
    where present-but-empty maps (`{"hard": {}, "used": {}}`) count as
    reported and publish empty hard and used lists. Here they get the
    zero-usage fallback instead.
    """
    if not total:
        return True
    return not total.get("hard") and not total.get("used")


def normalize_quota(
    resource: Mapping[str, Any],
    storage_class: str = DEFAULT_STORAGE_CLASS,
) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Select and canonicalize the hard/used maps of a resource quota.

    Args:
        resource: Decoded ResourceQuota object
            (``spec.quota.hard``, optional ``status.total.{hard,used}``)
        storage_class: Storage class used for the zero-fallback storage key

    Returns:
        Tuple of (hard, used)

    Raises:
        QuotaShapeError: If a section is present but not an object
        QuantityError: If a quantity cannot be parsed
    """
    spec = _section(resource, "spec", "spec")
    quota = _section(spec, "quota", "spec.quota")
    status = _section(resource, "status", "status")
    total = _section(status, "total", "status.total")

    if is_zero_total(total):
        hard = resource_list_to_strings(quota.get("hard"))
        return hard, fallback_used(storage_class)

    hard = resource_list_to_strings(total.get("hard"))
    used = resource_list_to_strings(total.get("used"))
    return hard, used
