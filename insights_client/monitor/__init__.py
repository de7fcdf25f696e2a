"""
Cluster membership tracking.

Keeps the list of clusters registered to the hub, their cluster IDs and
whether each one needs insights reports, fed by ManagedCluster watch events.
"""
from .clustermonitor import ClusterMonitor
from .resources import (
    ClusterResource,
    LocalClusterResource,
    ManagedClusterResource,
    resolve_identity,
)
from .watch import ClusterLookup, ClusterWatcher

__all__ = [
    'ClusterMonitor',
    'ClusterResource',
    'LocalClusterResource',
    'ManagedClusterResource',
    'resolve_identity',
    'ClusterLookup',
    'ClusterWatcher',
]
