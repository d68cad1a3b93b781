"""Workspace resource quota fetcher.

For one (workspace, cluster) pair, reads the workspace's ResourceQuota through
the KubeSphere multi-cluster proxy and normalizes it into a QuotaSnapshot.

Failures are reported per pair as FetchError so the caller can skip just that
pair; a non-200 response is never decoded.
"""

from __future__ import annotations

from ..data.models import QuotaSnapshot, Session
from ..data.normalization import DEFAULT_STORAGE_CLASS, QuotaShapeError, normalize_quota
from ..data.quantity import QuantityError
from .base import BaseCollector, FailureKind, FetchError

QUOTA_PATH_TEMPLATE = (
    "kapis/clusters/{cluster}/tenant.kubesphere.io/v1alpha2/"
    "workspaces/{workspace}/resourcequotas/{workspace}"
)


class QuotaFetcher(BaseCollector):
    """Collector for per-cluster workspace quotas."""

    error_cls = FetchError

    def __init__(self, http, fallback_storage_class: str = DEFAULT_STORAGE_CLASS):
        super().__init__(http)
        self.fallback_storage_class = fallback_storage_class

    @property
    def name(self) -> str:
        return "quota"

    def quota_url(self, session: Session, workspace: str, cluster: str) -> str:
        return session.url(QUOTA_PATH_TEMPLATE.format(cluster=cluster, workspace=workspace))

    def get_quota(self, session: Session, workspace: str, cluster: str) -> QuotaSnapshot:
        """Fetch and normalize the quota of one workspace on one cluster.

        If the cluster has not reported aggregated usage yet, the snapshot
        carries the declared hard limits and a zero-valued usage map.

        Raises:
            FetchError: On transport failure, non-200 status, or a body that
                is not a valid ResourceQuota.
        """
        url = self.quota_url(session, workspace, cluster)
        resource = self._get_json(url, session.token)

        try:
            hard, used = normalize_quota(resource, storage_class=self.fallback_storage_class)
        except (QuotaShapeError, QuantityError) as e:
            raise self._fail(
                FailureKind.MALFORMED,
                f"Invalid resource quota for workspace '{workspace}' on cluster '{cluster}': {e}",
                e,
            )

        return QuotaSnapshot(workspace=workspace, cluster=cluster, hard=hard, used=used)
