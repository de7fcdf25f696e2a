"""Fetch insights reports for the clusters that need them."""
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

import requests

from .config import Config
from .exceptions import ReportError
from .monitor import ClusterMonitor
from .utils import RetryError, retry

logger = logging.getLogger(__name__)

USER_AGENT = "insights-client"


class ReportClient:
    """Client for the insights report service."""

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT
        if config.ccx_token:
            self.session.headers["Authorization"] = f"Bearer {config.ccx_token}"

    def report_url(self, cluster_id: str) -> str:
        return f"{self.config.ccx_server.rstrip('/')}/{cluster_id}/report"

    def get_report(self, cluster_id: str) -> Optional[Dict[str, Any]]:
        """Return the report of a cluster, or None if the service has none yet.

        Raises:
            ReportError: If the service cannot be queried
        """
        if self.config.use_mock:
            return mock_report(cluster_id)
        try:
            return self._fetch(cluster_id)
        except RetryError as e:
            raise ReportError(f"Failed to fetch report for {cluster_id}: {e}") from e
        except requests.RequestException as e:
            raise ReportError(f"Report request for {cluster_id} failed: {e}") from e

    @retry(max_retries=2, delay=1.0, exceptions=(requests.ConnectionError, requests.Timeout))
    def _fetch(self, cluster_id: str) -> Optional[Dict[str, Any]]:
        response = self.session.get(self.report_url(cluster_id), timeout=self.config.http_timeout_seconds)
        if response.status_code == 404:
            logger.debug("No report for cluster %s yet", cluster_id)
            return None
        if response.status_code != 200:
            raise ReportError(
                f"Report request for {cluster_id} failed: {response.status_code} {response.text}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise ReportError(f"Report for {cluster_id} is not valid JSON") from e


def mock_report(cluster_id: str) -> Dict[str, Any]:
    return {
        "report": {
            "meta": {"count": 0, "last_checked_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())},
            "data": [],
        },
        "status": "ok",
        "cluster_id": cluster_id,
    }


class ReportPoller:
    """Periodically fetches reports for every cluster the monitor flags."""

    def __init__(
        self,
        monitor: ClusterMonitor,
        client: ReportClient,
        config: Config,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.monitor = monitor
        self.client = client
        self.config = config
        self.sleep = sleep
        self.reports: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get_report(self, cluster_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self.reports.get(cluster_id)

    def poll_once(self) -> int:
        """Fetch one report per flagged cluster. Returns the number fetched."""
        snapshot = self.monitor.snapshot()
        clusters = snapshot.clusters_needing_ccx()
        fetched = 0

        for i, cluster in enumerate(clusters):
            if i:
                self.sleep(self.config.request_interval)
            try:
                report = self.client.get_report(cluster.cluster_id)
            except ReportError as e:
                logger.error("%s", e)
                continue
            if report is not None:
                with self._lock:
                    self.reports[cluster.cluster_id] = report
                fetched += 1

        registered = {c.cluster_id for c in snapshot.clusters}
        with self._lock:
            for cluster_id in list(self.reports):
                if cluster_id not in registered:
                    del self.reports[cluster_id]

        logger.info("Polled %d of %d clusters needing reports", fetched, len(clusters))
        return fetched

    def run(self, stop_event: threading.Event) -> None:
        """Poll every ``poll_interval`` minutes until ``stop_event`` is set."""
        while not stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.error("Report polling failed: %s", e)
            stop_event.wait(self.config.poll_interval * 60)
