"""Data models for quota synchronization.

This module defines the records that flow through one sync run:

1. SESSION
   - Built once per run, only after authentication succeeds
   - Carries the control-plane base URL, bearer token and bus publisher

2. PLACEMENTS AND SNAPSHOTS
   - WorkspacePlacement: which clusters a workspace is placed on
   - QuotaSnapshot: hard/used quantity strings for one (workspace, cluster)

3. EVENTS
   - Fixed envelope (btype, action, data) serialized only at the bus boundary
   - Quantities stay opaque canonical strings ("500m", "2Gi")
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from .publisher import EventPublisher


# =============================================================================
# Event Enumerations
# =============================================================================


class BusinessType(str, Enum):
    """Business type tag of a bus event."""

    K8S_QUOTA = "k8s_quota"


class EventAction(str, Enum):
    """Action tag of a bus event."""

    UPDATE = "update"


# =============================================================================
# Run Session
# =============================================================================


@dataclass(frozen=True)
class TokenResponse:
    """Body of a successful OAuth token exchange."""

    access_token: str
    token_type: str = ""
    refresh_token: str = ""

    @property
    def bearer(self) -> str:
        """Authorization header value."""
        return f"Bearer {self.access_token}"


@dataclass(frozen=True)
class Session:
    """Per-run session state shared by every downstream call."""

    base_url: str
    token: str  # Full Authorization header value, e.g. "Bearer abc"
    publisher: Optional["EventPublisher"] = None

    def __post_init__(self):
        if not self.token:
            raise ValueError("Session requires a bearer token")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    def url(self, path: str) -> str:
        """Join an API path onto the base URL."""
        return f"{self.base_url}/{path.lstrip('/')}"


# =============================================================================
# Placement and Quota Records
# =============================================================================


@dataclass(frozen=True)
class WorkspacePlacement:
    """A workspace and the clusters it is placed on, in control-plane order."""

    name: str
    clusters: Tuple[str, ...] = ()

    def __post_init__(self):
        # Drop repeated cluster names, keeping the first occurrence
        object.__setattr__(self, "clusters", tuple(dict.fromkeys(self.clusters)))


@dataclass(frozen=True)
class QuotaSnapshot:
    """Quota state of one workspace on one cluster.

    Both maps are always present; values are canonical quantity strings.
    """

    workspace: str
    cluster: str
    hard: Dict[str, str] = field(default_factory=dict)
    used: Dict[str, str] = field(default_factory=dict)

    @property
    def pair(self) -> Tuple[str, str]:
        return self.workspace, self.cluster

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workspace": self.workspace,
            "cluster": self.cluster,
            "quota": {
                "hard": dict(self.hard),
                "used": dict(self.used),
            },
        }


@dataclass(frozen=True)
class Event:
    """Bus event envelope for one quota snapshot."""

    data: QuotaSnapshot
    btype: BusinessType = BusinessType.K8S_QUOTA
    action: EventAction = EventAction.UPDATE

    @property
    def key(self) -> bytes:
        """Message key; every quota event shares the business type as key."""
        return self.btype.value.encode("utf-8")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "btype": self.btype.value,
            "action": self.action.value,
            "data": self.data.to_dict(),
        }

    def to_bytes(self) -> bytes:
        """Serialize to UTF-8 JSON."""
        return json.dumps(self.to_dict(), ensure_ascii=False).encode("utf-8")


# =============================================================================
# Run Summary
# =============================================================================


@dataclass
class SkippedPair:
    """A (workspace, cluster) pair left out of the run."""

    workspace: str
    cluster: str
    kind: str  # FailureKind value: 'TRANSPORT', 'BAD_STATUS', 'MALFORMED'
    message: str
    status_code: Optional[int] = None


@dataclass
class SyncResult:
    """Outcome of one synchronization run."""

    workspaces: int = 0
    published: List[Tuple[str, str]] = field(default_factory=list)
    skipped: List[SkippedPair] = field(default_factory=list)

    @property
    def malformed(self) -> List[SkippedPair]:
        """Skipped pairs whose quota body could not be parsed."""
        return [s for s in self.skipped if s.kind == "MALFORMED"]

    def summary(self) -> str:
        return (
            f"{self.workspaces} workspaces, {len(self.published)} events published, "
            f"{len(self.skipped)} pairs skipped"
        )
