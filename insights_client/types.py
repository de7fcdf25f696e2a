"""
Data types shared by the cluster monitor, the report poller and the API.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

LOCAL_CLUSTER_NAMESPACE = "local-cluster"


@dataclass(frozen=True)
class ManagedClusterInfo:
    """One cluster registered to the hub."""
    namespace: str
    cluster_id: str


@dataclass(frozen=True)
class ClusterIdentity:
    """Result of resolving a cluster resource."""
    namespace: str
    cluster_id: str
    is_openshift: bool = False

    def to_info(self) -> ManagedClusterInfo:
        return ManagedClusterInfo(namespace=self.namespace, cluster_id=self.cluster_id)


@dataclass(frozen=True)
class ClusterSnapshot:
    """Read-only copy of the registry state at one point in time."""
    clusters: Tuple[ManagedClusterInfo, ...] = ()
    needs_ccx: Dict[str, bool] = field(default_factory=dict)

    def clusters_needing_ccx(self) -> List[ManagedClusterInfo]:
        """Return the clusters whose reports should be polled, in list order."""
        return [c for c in self.clusters if self.needs_ccx.get(c.cluster_id, False)]

    @property
    def local_cluster(self) -> str:
        for cluster in self.clusters:
            if cluster.namespace == LOCAL_CLUSTER_NAMESPACE:
                return cluster.cluster_id
        return ""
