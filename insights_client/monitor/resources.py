"""Cluster resource adapters and identity resolution.

Two resource shapes feed the cluster monitor:

- ``ManagedCluster`` (cluster.open-cluster-management.io/v1), one per
  cluster registered to the hub. The cluster ID and the vendor are read
  from its cluster claims and labels.
- ``ClusterVersion`` (config.openshift.io/v1) of the hub itself. Its
  ``spec.clusterID`` is the hub's own ID, registered as ``local-cluster``.

Both are handled as plain dicts, the shape returned by the Kubernetes
``CustomObjectsApi``.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from ..exceptions import MalformedResourceError
from ..types import LOCAL_CLUSTER_NAMESPACE, ClusterIdentity

logger = logging.getLogger(__name__)

OPENSHIFT_ID_CLAIM = "id.openshift.io"
KUBERNETES_ID_CLAIM = "id.k8s.io"
PRODUCT_CLAIM = "product.open-cluster-management.io"
CLUSTER_ID_LABEL = "clusterID"
VENDOR_LABEL = "vendor"

OPENSHIFT_VENDORS = frozenset({"OpenShift", "OpenShiftDedicated", "ROSA", "ARO", "ROKS"})


def _mapping(obj: Any, path: str) -> Mapping[str, Any]:
    if obj is None:
        return {}
    if not isinstance(obj, Mapping):
        raise MalformedResourceError(f"{path} is {type(obj).__name__}, expected an object")
    return obj


class ClusterResource:
    """Base adapter: exposes a namespace, a cluster ID and an OpenShift flag."""

    kind = "Resource"

    def __init__(self, obj: Mapping[str, Any]):
        self.obj = _mapping(obj, self.kind)

    @property
    def metadata(self) -> Mapping[str, Any]:
        return _mapping(self.obj.get("metadata"), "metadata")

    @property
    def namespace(self) -> str:
        raise NotImplementedError

    def cluster_id(self) -> str:
        """Return the durable cluster ID, or raise MalformedResourceError."""
        raise NotImplementedError

    def is_openshift(self) -> bool:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}({self.namespace!r})"


class ManagedClusterResource(ClusterResource):
    """Adapter for ManagedCluster objects."""

    kind = "ManagedCluster"

    @property
    def namespace(self) -> str:
        metadata = self.metadata
        name = metadata.get("name") or metadata.get("namespace")
        if not name or not isinstance(name, str):
            raise MalformedResourceError("ManagedCluster has no metadata.name")
        return name

    @property
    def labels(self) -> Mapping[str, Any]:
        return _mapping(self.metadata.get("labels"), "metadata.labels")

    def claims(self) -> Dict[str, str]:
        """Return the cluster claims as a name -> value dict."""
        status = _mapping(self.obj.get("status"), "status")
        raw: Optional[List[Any]] = status.get("clusterClaims")
        if raw is None:
            return {}
        if not isinstance(raw, list):
            raise MalformedResourceError("status.clusterClaims is not a list")
        claims = {}
        for claim in raw:
            claim = _mapping(claim, "status.clusterClaims[]")
            name, value = claim.get("name"), claim.get("value")
            if isinstance(name, str) and isinstance(value, str):
                claims[name] = value
        return claims

    def cluster_id(self) -> str:
        claims = self.claims()
        cluster_id = claims.get(OPENSHIFT_ID_CLAIM) or claims.get(KUBERNETES_ID_CLAIM)
        if not cluster_id:
            # Labels are only read once the claims are exhausted
            cluster_id = self.labels.get(CLUSTER_ID_LABEL)
        if cluster_id and isinstance(cluster_id, str):
            return cluster_id
        raise MalformedResourceError(f"ManagedCluster {self.namespace} has no cluster ID claim")

    def vendor(self) -> str:
        vendor = self.labels.get(VENDOR_LABEL)
        if not vendor:
            vendor = self.claims().get(PRODUCT_CLAIM, "")
        return vendor if isinstance(vendor, str) else ""

    def is_openshift(self) -> bool:
        return self.vendor() in OPENSHIFT_VENDORS


class LocalClusterResource(ClusterResource):
    """Adapter for the hub's ClusterVersion object."""

    kind = "ClusterVersion"

    @property
    def namespace(self) -> str:
        return LOCAL_CLUSTER_NAMESPACE

    def cluster_id(self) -> str:
        spec = _mapping(self.obj.get("spec"), "spec")
        cluster_id = spec.get("clusterID")
        if not cluster_id or not isinstance(cluster_id, str):
            raise MalformedResourceError("ClusterVersion has no spec.clusterID")
        return cluster_id

    def is_openshift(self) -> bool:
        # ClusterVersion only exists on OpenShift
        return True


ResourceLike = Union[ClusterResource, Mapping[str, Any]]


def as_managed_cluster(resource: ResourceLike) -> ClusterResource:
    if isinstance(resource, ClusterResource):
        return resource
    return ManagedClusterResource(resource)


def as_local_cluster(resource: ResourceLike) -> ClusterResource:
    if isinstance(resource, ClusterResource):
        return resource
    return LocalClusterResource(resource)


def resolve_namespace(resource: ClusterResource) -> str:
    """Return the resource's namespace, or "" when it cannot be read."""
    try:
        return resource.namespace
    except MalformedResourceError as e:
        logger.warning("Cannot read cluster name: %s", e)
        return ""


def resolve_identity(resource: ClusterResource) -> ClusterIdentity:
    """Resolve the namespace, cluster ID and OpenShift flag of a cluster resource.

    Never raises for malformed input. A resource without a readable cluster
    ID is identified by its namespace and is not treated as OpenShift.
    """
    namespace = resolve_namespace(resource)
    try:
        cluster_id = resource.cluster_id()
    except MalformedResourceError as e:
        logger.info("Using fallback identity for %s: %s", namespace, e)
        return ClusterIdentity(namespace=namespace, cluster_id=namespace, is_openshift=False)
    try:
        is_openshift = resource.is_openshift()
    except MalformedResourceError as e:
        logger.info("Cannot read the platform of %s, assuming not OpenShift: %s", namespace, e)
        is_openshift = False

    if not is_openshift:
        logger.debug("Cluster %s (%s) is not an OpenShift cluster", namespace, cluster_id)
    return ClusterIdentity(namespace=namespace, cluster_id=cluster_id, is_openshift=is_openshift)
