"""Synchronization run: authenticate, enumerate, then fetch and publish.

One Synchronizer drives exactly one run and is the only holder of run-scoped
state. Work is strictly sequential: each (workspace, cluster) pair is fetched
and published before the next one starts.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Set, Tuple

from ..collectors.auth import Authenticator
from ..collectors.base import FetchError
from ..collectors.http import HttpClient
from ..collectors.quota import QuotaFetcher
from ..collectors.workspaces import WorkspaceEnumerator
from ..data.models import Session, SkippedPair, SyncResult, WorkspacePlacement
from ..data.publisher import EventPublisher
from .config import Config, Secrets


def _log(msg: str) -> None:
    """Print with flush so lines reach the container log immediately."""
    print(msg, flush=True)


class SyncState(str, Enum):
    """Lifecycle of a single run."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    AUTHENTICATED = "AUTHENTICATED"
    DRAINING = "DRAINING"
    DONE = "DONE"


class Synchronizer:
    """Drives one enumerate -> fetch -> publish run.

    AuthError, EnumError and PublishError propagate and end the run.
    FetchError only skips the affected pair.
    """

    def __init__(
        self,
        secrets: Secrets,
        authenticator: Authenticator,
        workspaces: WorkspaceEnumerator,
        quotas: QuotaFetcher,
        publisher: EventPublisher,
        http: Optional[HttpClient] = None,
    ):
        self.secrets = secrets
        self.authenticator = authenticator
        self.workspaces = workspaces
        self.quotas = quotas
        self.publisher = publisher
        self._http = http
        self.state = SyncState.UNAUTHENTICATED
        self.session: Optional[Session] = None
        self._started = False

    @classmethod
    def from_config(cls, config: Config, secrets: Secrets) -> "Synchronizer":
        """Wire up collectors and publisher from configuration."""
        http = HttpClient(
            timeout=config.http.timeout,
            insecure=config.http.insecure,
            ca_bundle=config.http.ca_bundle,
        )
        publisher = EventPublisher(
            secrets.kafka_brokers,
            secrets.kafka_topic,
            acks=config.kafka.acks,
            retries=config.kafka.retries,
            retry_backoff_ms=config.kafka.retry_backoff_ms,
            send_timeout=config.kafka.send_timeout,
            client_id=config.kafka.client_id,
        )
        return cls(
            secrets,
            Authenticator(http),
            WorkspaceEnumerator(http),
            QuotaFetcher(http, fallback_storage_class=config.quota.fallback_storage_class),
            publisher,
            http=http,
        )

    def run(self) -> SyncResult:
        """Run the full pipeline once.

        Returns:
            SyncResult with published and skipped pairs

        Raises:
            AuthError: Token exchange failed
            EnumError: Workspace listing failed
            PublishError: An event could not be written
            RuntimeError: If this synchronizer already ran
        """
        if self._started:
            raise RuntimeError("Synchronizer instances run once; create a new one per run")
        self._started = True

        token = self.authenticator.authenticate(
            self.secrets.host, self.secrets.user, self.secrets.password
        )
        self.session = Session(base_url=self.secrets.host, token=token, publisher=self.publisher)
        self.state = SyncState.AUTHENTICATED

        placements = self.workspaces.list_workspaces(self.session)
        self.state = SyncState.DRAINING

        result = SyncResult(workspaces=len(placements))
        seen: Set[Tuple[str, str]] = set()
        for placement in placements:
            self._drain_workspace(placement, seen, result)

        self.state = SyncState.DONE
        _log(f"[synchronizer] Run complete: {result.summary()}")
        return result

    def _drain_workspace(
        self,
        placement: WorkspacePlacement,
        seen: Set[Tuple[str, str]],
        result: SyncResult,
    ) -> None:
        if not placement.clusters:
            _log(f"[synchronizer] Workspace '{placement.name}' has no cluster placement, skipping")
            return

        for cluster in placement.clusters:
            pair = (placement.name, cluster)
            if pair in seen:
                _log(f"[synchronizer] Duplicate pair {pair} in listing, already handled")
                continue
            seen.add(pair)

            try:
                snapshot = self.quotas.get_quota(self.session, placement.name, cluster)
            except FetchError as e:
                _log(f"[synchronizer] Skipping workspace '{placement.name}' on cluster '{cluster}': {e}")
                result.skipped.append(
                    SkippedPair(
                        workspace=placement.name,
                        cluster=cluster,
                        kind=e.kind.value,
                        message=str(e),
                        status_code=e.status_code,
                    )
                )
                continue

            self.session.publisher.publish(snapshot)
            result.published.append(pair)

    def close(self) -> None:
        """Flush the publisher and release HTTP connections."""
        try:
            self.publisher.close()
        finally:
            if self._http is not None:
                self._http.close()
