"""Workspace template enumerator.

Lists every workspace template on the host cluster together with the member
clusters it is placed on. The collection endpoint is not paginated.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..data.models import Session, WorkspacePlacement
from .base import BaseCollector, EnumError, FailureKind

WORKSPACE_TEMPLATES_PATH = "apis/tenant.kubesphere.io/v1alpha2/workspacetemplates"


class WorkspaceEnumerator(BaseCollector):
    """Collector for workspace templates and their cluster placements."""

    error_cls = EnumError

    @property
    def name(self) -> str:
        return "workspaces"

    def list_workspaces(self, session: Session) -> List[WorkspacePlacement]:
        """List all workspaces in control-plane order.

        Raises:
            EnumError: On transport failure, non-200 status, or a malformed body.
        """
        url = session.url(WORKSPACE_TEMPLATES_PATH)
        try:
            data = self._get_json(url, session.token)
            placements = self._parse_template_list(data)
        except EnumError as e:
            print(f"[workspaces] Listing workspace templates failed: {e}", flush=True)
            raise

        print(f"[workspaces] Found {len(placements)} workspaces", flush=True)
        return placements

    def _parse_template_list(self, data: Dict[str, Any]) -> List[WorkspacePlacement]:
        items = data.get("items")
        if items is None:
            return []
        if not isinstance(items, list):
            raise self._fail(FailureKind.MALFORMED, "Workspace template 'items' is not a list")
        return [self._parse_template(index, item) for index, item in enumerate(items)]

    def _parse_template(self, index: int, item: Any) -> WorkspacePlacement:
        if not isinstance(item, dict):
            raise self._fail(FailureKind.MALFORMED, f"Workspace template #{index} is not an object")

        metadata = item.get("metadata") or {}
        name = metadata.get("name") if isinstance(metadata, dict) else None
        if not isinstance(name, str) or not name:
            raise self._fail(FailureKind.MALFORMED, f"Workspace template #{index} has no metadata.name")

        return WorkspacePlacement(name=name, clusters=tuple(self._parse_clusters(name, item)))

    def _parse_clusters(self, workspace: str, item: Dict[str, Any]) -> List[str]:
        """Read spec.placement.clusters[].name; missing sections mean no placement."""
        spec = item.get("spec") or {}
        if not isinstance(spec, dict):
            raise self._fail(FailureKind.MALFORMED, f"Workspace '{workspace}' spec is not an object")
        placement = spec.get("placement") or {}
        if not isinstance(placement, dict):
            raise self._fail(FailureKind.MALFORMED, f"Workspace '{workspace}' placement is not an object")
        clusters = placement.get("clusters") or []
        if not isinstance(clusters, list):
            raise self._fail(
                FailureKind.MALFORMED,
                f"Workspace '{workspace}' placement clusters is not a list",
            )

        names = []
        for cluster in clusters:
            cluster_name = cluster.get("name") if isinstance(cluster, dict) else None
            if not isinstance(cluster_name, str) or not cluster_name:
                raise self._fail(
                    FailureKind.MALFORMED,
                    f"Workspace '{workspace}' has a placement entry without a cluster name",
                )
            names.append(cluster_name)
        return names
