"""In-memory registry of the clusters known to the hub.

The registry keeps an ordered list of ``ManagedClusterInfo`` entries and a
``cluster_id -> bool`` map recording whether each cluster needs reports.
Both are guarded by one reader-writer lock and always change together, so
a reader never sees them disagree.
"""
import logging
from typing import Dict, Iterable, List, Optional

from ..exceptions import ResolutionAnomaly
from ..types import LOCAL_CLUSTER_NAMESPACE, ClusterIdentity, ClusterSnapshot, ManagedClusterInfo
from ..utils import ReadWriteLock
from .resources import (
    ResourceLike,
    as_local_cluster,
    as_managed_cluster,
    resolve_identity,
    resolve_namespace,
)

logger = logging.getLogger(__name__)


class ClusterMonitor:
    """Tracks cluster membership and which clusters need insights reports."""

    def __init__(self):
        self._lock = ReadWriteLock()
        self._clusters: List[ManagedClusterInfo] = []
        self._needs_ccx: Dict[str, bool] = {}

    def add_cluster(self, resource: ResourceLike) -> bool:
        """Register a newly observed ManagedCluster.

        Appends unconditionally: callers only add clusters they have not
        added before.
        """
        return self._add(resolve_identity(as_managed_cluster(resource)))

    def add_local_cluster(self, resource: ResourceLike) -> bool:
        """Register the hub itself from its ClusterVersion object."""
        return self._add(resolve_identity(as_local_cluster(resource)))

    def update_cluster(self, resource: ResourceLike) -> bool:
        """Replace the entry of an already registered cluster.

        Returns False, leaving the registry unchanged, if the cluster is not
        registered.
        """
        identity = resolve_identity(as_managed_cluster(resource))
        with self._lock.write_locked():
            try:
                idx = self._index_of(identity.namespace, "update")
            except ResolutionAnomaly as e:
                logger.warning("%s; ignoring update", e)
                return False

            old = self._clusters[idx]
            self._clusters[idx] = identity.to_info()
            self._forget_id(old.cluster_id)
            self._needs_ccx[identity.cluster_id] = identity.is_openshift

        if old.cluster_id != identity.cluster_id:
            logger.info("Cluster %s changed ID from %s to %s",
                        identity.namespace, old.cluster_id, identity.cluster_id)
        else:
            logger.debug("Updated cluster %s (%s)", identity.namespace, identity.cluster_id)
        return True

    def delete_cluster(self, resource: ResourceLike) -> bool:
        """Remove a cluster, matched by namespace.

        Matching by namespace works even when the resource being torn down
        no longer carries its ID claims. Returns False if nothing matched.
        """
        namespace = resolve_namespace(as_managed_cluster(resource))
        with self._lock.write_locked():
            try:
                idx = self._index_of(namespace, "delete")
            except ResolutionAnomaly as e:
                logger.warning("%s; nothing to delete", e)
                return False

            removed = self._clusters.pop(idx)
            self._forget_id(removed.cluster_id)

        logger.info("Removed %s (%s) from the insights cluster list", removed.namespace, removed.cluster_id)
        return True

    def reset(self) -> None:
        """Forget every registered cluster."""
        with self._lock.write_locked():
            self._clusters = []
            self._needs_ccx = {}
        logger.debug("Cluster list reset")

    def replace(self, resources: Iterable[ResourceLike], local: Optional[ResourceLike] = None) -> List[str]:
        """Swap in a freshly listed set of clusters in one step.

        ``resources`` are ManagedClusters and ``local`` is the hub's
        ClusterVersion, if any. The ClusterVersion identity takes the place of a
        ManagedCluster named local-cluster. Readers see either the old or the
        new registry, never a partial one. Returns the registered namespaces.
        """
        identities = [resolve_identity(as_managed_cluster(r)) for r in resources]
        if local is not None:
            local_identity = resolve_identity(as_local_cluster(local))
            shared = [i for i, identity in enumerate(identities) if identity.namespace == LOCAL_CLUSTER_NAMESPACE]
            if shared:
                identities[shared[0]] = local_identity
                for idx in reversed(shared[1:]):
                    del identities[idx]
            else:
                identities.append(local_identity)

        clusters: List[ManagedClusterInfo] = []
        needs_ccx: Dict[str, bool] = {}
        for identity in identities:
            if not identity.namespace:
                logger.warning("Ignoring cluster resource without a name")
                continue
            clusters.append(identity.to_info())
            needs_ccx[identity.cluster_id] = identity.is_openshift

        with self._lock.write_locked():
            self._clusters = clusters
            self._needs_ccx = needs_ccx

        logger.info("Replaced the insights cluster list with %d clusters", len(clusters))
        return [info.namespace for info in clusters]

    def get_local_cluster(self) -> str:
        """Return the hub's own cluster ID, or "" if it is not registered."""
        info = self.get_cluster(LOCAL_CLUSTER_NAMESPACE)
        return info.cluster_id if info else ""

    def get_cluster(self, namespace: str) -> Optional[ManagedClusterInfo]:
        with self._lock.read_locked():
            for info in self._clusters:
                if info.namespace == namespace:
                    return info
        return None

    def snapshot(self) -> ClusterSnapshot:
        """Return a copy of the cluster list and the need-flag map."""
        with self._lock.read_locked():
            return ClusterSnapshot(clusters=tuple(self._clusters), needs_ccx=dict(self._needs_ccx))

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._clusters)

    def _add(self, identity: ClusterIdentity) -> bool:
        if not identity.namespace:
            logger.warning("Ignoring cluster resource without a name")
            return False

        with self._lock.write_locked():
            self._clusters.append(identity.to_info())
            self._needs_ccx[identity.cluster_id] = identity.is_openshift

        logger.info("Added %s (%s) to the insights cluster list, needs reports: %s",
                    identity.namespace, identity.cluster_id, identity.is_openshift)
        return True

    def _forget_id(self, cluster_id: str) -> None:
        # Caller holds the lock; the key stays while another entry shares the ID
        if not any(info.cluster_id == cluster_id for info in self._clusters):
            self._needs_ccx.pop(cluster_id, None)

    def _index_of(self, namespace: str, operation: str) -> int:
        # Caller holds the lock
        for idx, info in enumerate(self._clusters):
            if info.namespace == namespace:
                return idx
        raise ResolutionAnomaly(namespace, operation)
