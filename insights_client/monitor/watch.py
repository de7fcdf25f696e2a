"""Feed the cluster monitor from Kubernetes watch events."""
import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from kubernetes import client, watch
from kubernetes.client.rest import ApiException

from ..exceptions import ClusterMissingError, is_cluster_missing
from ..types import LOCAL_CLUSTER_NAMESPACE
from .clustermonitor import ClusterMonitor
from .resources import LocalClusterResource, ManagedClusterResource, resolve_namespace

logger = logging.getLogger(__name__)

MANAGED_CLUSTER_GROUP = "cluster.open-cluster-management.io"
MANAGED_CLUSTER_VERSION = "v1"
MANAGED_CLUSTER_PLURAL = "managedclusters"

CLUSTER_VERSION_GROUP = "config.openshift.io"
CLUSTER_VERSION_VERSION = "v1"
CLUSTER_VERSION_PLURAL = "clusterversions"
CLUSTER_VERSION_NAME = "version"

WATCH_TIMEOUT_SECONDS = 300
WATCH_RETRY_SECONDS = 10


class ClusterLookup:
    """Reads ManagedCluster and ClusterVersion objects from the hub.

    A lookup of an object that does not exist raises ClusterMissingError;
    other API errors propagate as ApiException.
    """

    def __init__(self, api: Optional[client.CustomObjectsApi] = None):
        self.api = api or client.CustomObjectsApi()

    def get_managed_cluster(self, name: str) -> Dict[str, Any]:
        try:
            return self.api.get_cluster_custom_object(
                group=MANAGED_CLUSTER_GROUP,
                version=MANAGED_CLUSTER_VERSION,
                plural=MANAGED_CLUSTER_PLURAL,
                name=name,
            )
        except ApiException as e:
            if is_cluster_missing(e):
                raise ClusterMissingError("ManagedCluster", name) from e
            raise

    def list_managed_clusters(self) -> Dict[str, Any]:
        """Return the ManagedCluster list object (``items`` and ``metadata``)."""
        return self.api.list_cluster_custom_object(
            group=MANAGED_CLUSTER_GROUP,
            version=MANAGED_CLUSTER_VERSION,
            plural=MANAGED_CLUSTER_PLURAL,
        )

    def get_cluster_version(self, name: str = CLUSTER_VERSION_NAME) -> Dict[str, Any]:
        try:
            return self.api.get_cluster_custom_object(
                group=CLUSTER_VERSION_GROUP,
                version=CLUSTER_VERSION_VERSION,
                plural=CLUSTER_VERSION_PLURAL,
                name=name,
            )
        except ApiException as e:
            if is_cluster_missing(e):
                raise ClusterMissingError("ClusterVersion", name) from e
            raise


class ClusterWatcher:
    """Applies ManagedCluster watch events to a ClusterMonitor.

    The watcher remembers which cluster names it has added so that an ADDED
    event replayed after a re-list becomes an update instead of a duplicate.
    """

    def __init__(
        self,
        monitor: ClusterMonitor,
        lookup: ClusterLookup,
        watch_factory: Callable[[], watch.Watch] = watch.Watch,
    ):
        self.monitor = monitor
        self.lookup = lookup
        self.watch_factory = watch_factory
        self.resource_version: Optional[str] = None
        self._known: Set[str] = set()
        self._watch: Optional[watch.Watch] = None

    def handle_event(self, event: Mapping[str, Any]) -> None:
        event_type = event.get("type")
        obj = event.get("object")

        if event_type == "ERROR":
            if isinstance(obj, Mapping) and obj.get("code") == 410:
                raise ApiException(status=410, reason=obj.get("message", "Expired"))
            logger.warning("Watch error event: %s", obj)
            return
        if not isinstance(obj, Mapping):
            logger.warning("Ignoring %s event without an object", event_type)
            return

        version = (obj.get("metadata") or {}).get("resourceVersion")
        if version:
            self.resource_version = version
        if event_type == "BOOKMARK":
            return

        name = resolve_namespace(ManagedClusterResource(obj))
        if event_type in ("ADDED", "MODIFIED"):
            self._upsert(name, obj)
        elif event_type == "DELETED":
            self._delete(name, obj)
        else:
            logger.debug("Ignoring %s event for %s", event_type, name)

    def register_local_cluster(self) -> bool:
        """Register the hub from its ClusterVersion. Returns False if it has none."""
        version = self._read_cluster_version()
        if version is None:
            return False

        # ACM may also expose the hub as a ManagedCluster named local-cluster
        if LOCAL_CLUSTER_NAMESPACE in self._known and self.monitor.update_cluster(LocalClusterResource(version)):
            return True
        if self.monitor.add_local_cluster(version):
            self._known.add(LOCAL_CLUSTER_NAMESPACE)
            return True
        return False

    def refresh_cluster(self, name: str) -> None:
        """Re-read one ManagedCluster and apply what the hub currently holds.

        Raises:
            ApiException: If the hub cannot be queried
        """
        try:
            obj = self.lookup.get_managed_cluster(name)
        except ClusterMissingError:
            logger.info("ManagedCluster %s no longer exists", name)
            self.monitor.delete_cluster({"metadata": {"name": name}})
            self._known.discard(name)
            return
        self._upsert(name, obj)

    def resync(self) -> None:
        """Rebuild the registry from a fresh list of ManagedClusters."""
        listing = self.lookup.list_managed_clusters()
        items: List[Mapping[str, Any]] = listing.get("items") or []
        version = self._read_cluster_version()

        self._known = set(self.monitor.replace(items, version))
        self.resource_version = (listing.get("metadata") or {}).get("resourceVersion")
        logger.info("Resynced %d managed clusters", len(items))

    def run(self, stop_event: threading.Event) -> None:
        """Watch ManagedClusters until ``stop_event`` is set."""
        needs_resync = True
        while not stop_event.is_set():
            try:
                if needs_resync:
                    self.resync()
                    needs_resync = False
                self._stream(stop_event)
            except ApiException as e:
                if e.status == 410:
                    logger.info("Watch resource version expired, relisting")
                    needs_resync = True
                    continue
                logger.error("ManagedCluster watch failed: %s %s", e.status, e.reason)
                stop_event.wait(WATCH_RETRY_SECONDS)
            except Exception as e:
                logger.error("ManagedCluster watch failed: %s", e)
                stop_event.wait(WATCH_RETRY_SECONDS)

    def stop(self) -> None:
        if self._watch is not None:
            self._watch.stop()

    def _stream(self, stop_event: threading.Event) -> None:
        self._watch = self.watch_factory()
        kwargs = {"timeout_seconds": WATCH_TIMEOUT_SECONDS}
        if self.resource_version:
            kwargs["resource_version"] = self.resource_version
        for event in self._watch.stream(
            self.lookup.api.list_cluster_custom_object,
            MANAGED_CLUSTER_GROUP,
            MANAGED_CLUSTER_VERSION,
            MANAGED_CLUSTER_PLURAL,
            **kwargs,
        ):
            if stop_event.is_set():
                self._watch.stop()
                break
            self.handle_event(event)

    def _upsert(self, name: str, obj: Mapping[str, Any]) -> None:
        if name in self._known and self.monitor.update_cluster(obj):
            return
        if self.monitor.add_cluster(obj):
            self._known.add(name)


    def _delete(self, name: str, obj: Mapping[str, Any]) -> None:
        # A ManagedCluster recreated under the same name is kept
        if not name:
            logger.warning("Ignoring DELETED event for a ManagedCluster without a name")
            return
        try:
            self.refresh_cluster(name)
        except ApiException as e:
            logger.warning("Cannot confirm deletion of %s (%s %s), removing it", name, e.status, e.reason)
            self.monitor.delete_cluster(obj)
            self._known.discard(name)

    def _read_cluster_version(self) -> Optional[Dict[str, Any]]:
        try:
            return self.lookup.get_cluster_version()
        except ClusterMissingError:
            logger.info("No ClusterVersion found, the hub is not an OpenShift cluster")
        except ApiException as e:
            logger.warning("Failed to read the hub ClusterVersion: %s", e.reason)
        return None
