from kubernetes.client.rest import ApiException

from insights_client.exceptions import ClusterMissingError, is_cluster_missing


def test_is_cluster_missing():
    assert is_cluster_missing(None) is False
    assert is_cluster_missing(Exception("could not find the requested resource")) is True


def test_other_errors_are_not_missing():
    assert is_cluster_missing(Exception("connection refused")) is False
    assert is_cluster_missing(ApiException(status=500, reason="Internal Server Error")) is False


def test_typed_not_found_errors_are_missing():
    assert is_cluster_missing(ClusterMissingError("ManagedCluster", "gone"))
    assert is_cluster_missing(ApiException(status=404, reason="Not Found"))
