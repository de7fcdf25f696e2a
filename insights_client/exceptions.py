"""
Exceptions raised by the insights client.

None of these escape the cluster monitor's public operations; they are raised
at the boundary where a problem is detected and handled (logged, then a
fallback is applied) by the caller one level up.
"""
from typing import Optional

from kubernetes.client.rest import ApiException

# Message returned by the API server when a resource does not exist.
RESOURCE_NOT_FOUND_MESSAGE = "could not find the requested resource"


class InsightsClientError(Exception):
    """Base exception for insights client errors."""
    pass


class ClusterMissingError(InsightsClientError):
    """Raised when a looked-up cluster resource no longer exists."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} {name}: {RESOURCE_NOT_FOUND_MESSAGE}")


class ResolutionAnomaly(InsightsClientError):
    """Raised when an update or delete references a cluster that is not registered."""

    def __init__(self, namespace: str, operation: str):
        self.namespace = namespace
        self.operation = operation
        super().__init__(f"{operation}: cluster {namespace} is not registered")


class MalformedResourceError(InsightsClientError):
    """Raised when an expected field of a cluster resource is absent or has the wrong shape."""
    pass


class ConfigParseError(InsightsClientError):
    """Raised when an environment override cannot be parsed as the expected type."""

    def __init__(self, env: str, value: str, expected: str):
        self.env = env
        self.value = value
        self.expected = expected
        super().__init__(f"Error parsing env [{env}]. Expected {expected}, got {value!r}")


class ReportError(InsightsClientError):
    """Raised when the report service cannot be queried."""
    pass


def is_cluster_missing(err: Optional[BaseException]) -> bool:
    """Return True if ``err`` means the requested cluster resource does not exist."""
    if err is None:
        return False
    if isinstance(err, ClusterMissingError):
        return True
    if isinstance(err, ApiException) and err.status == 404:
        return True
    return RESOURCE_NOT_FOUND_MESSAGE in str(err)
