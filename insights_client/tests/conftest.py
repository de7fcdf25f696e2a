import copy
import json
from pathlib import Path

import pytest

from insights_client.monitor import ClusterMonitor

TEST_DATA = Path(__file__).parent / "test-data"


def load_resource(filename):
    with open(TEST_DATA / filename) as f:
        return json.load(f)


def with_cluster_id(resource, cluster_id):
    """Return a copy of a ManagedCluster whose OpenShift ID claim is ``cluster_id``."""
    resource = copy.deepcopy(resource)
    for claim in resource["status"]["clusterClaims"]:
        if claim["name"] == "id.openshift.io":
            claim["value"] = cluster_id
    return resource


def assert_consistent(monitor):
    snapshot = monitor.snapshot()
    namespaces = [c.namespace for c in snapshot.clusters]
    assert len(namespaces) == len(set(namespaces))
    assert {c.cluster_id for c in snapshot.clusters} == set(snapshot.needs_ccx)


@pytest.fixture
def monitor():
    return ClusterMonitor()


@pytest.fixture
def managed_cluster():
    return load_resource("managed-cluster.json")


@pytest.fixture
def non_openshift_cluster():
    return load_resource("managed-cluster-nonopenshift.json")


@pytest.fixture
def cluster_version():
    return load_resource("cluster-version.json")
