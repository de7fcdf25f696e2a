"""
insights-client

Tracks the clusters registered to a multi-cluster hub and polls insights
reports for the ones running OpenShift.
"""
from .monitor import ClusterMonitor
from .types import LOCAL_CLUSTER_NAMESPACE, ClusterSnapshot, ManagedClusterInfo

__all__ = [
    'ClusterMonitor',
    'ClusterSnapshot',
    'ManagedClusterInfo',
    'LOCAL_CLUSTER_NAMESPACE',
]

__version__ = "0.1.0"
