from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from insights_client.api import create_app

CLUSTER_ID = "323a00cd-428a-49fb-80ab-201d2a5d3050"
LOCAL_CLUSTER_ID = "58bd7441-812e-4fab-9aa6-eec452059c59"


@pytest.fixture
def poller():
    poller = MagicMock()
    poller.get_report.side_effect = lambda cluster_id: {"report": {"data": []}} if cluster_id == CLUSTER_ID else None
    return poller


@pytest.fixture
def api_client(monitor, poller, managed_cluster, non_openshift_cluster, cluster_version):
    non_openshift_cluster["metadata"]["name"] = "iks-cluster"
    monitor.add_cluster(managed_cluster)
    monitor.add_cluster(non_openshift_cluster)
    monitor.add_local_cluster(cluster_version)
    return TestClient(create_app(monitor, poller))


def test_liveness(api_client):
    response = api_client.get("/liveness")
    assert response.status_code == 200
    assert response.json() == {"status": "OK"}


def test_readiness_counts_clusters(api_client):
    assert api_client.get("/readiness").json()["clusters"] == 3


def test_list_clusters(api_client):
    body = api_client.get("/clusters").json()

    assert body["local_cluster"] == LOCAL_CLUSTER_ID
    assert body["clusters"][0] == {"namespace": "managed-cluster", "cluster_id": CLUSTER_ID, "needs_ccx": True}
    assert body["clusters"][1]["needs_ccx"] is False
    assert body["needs_ccx"] == {
        CLUSTER_ID: True,
        "local-cluster-non-openshift": False,
        LOCAL_CLUSTER_ID: True,
    }


def test_get_cluster(api_client):
    response = api_client.get("/clusters/iks-cluster")

    assert response.status_code == 200
    assert response.json()["cluster_id"] == "local-cluster-non-openshift"


def test_get_unknown_cluster(api_client):
    assert api_client.get("/clusters/nope").status_code == 404


def test_get_report(api_client):
    assert api_client.get(f"/reports/{CLUSTER_ID}").json() == {"report": {"data": []}}
    assert api_client.get("/reports/unknown").status_code == 404


def test_reports_without_poller(monitor):
    client = TestClient(create_app(monitor))

    assert client.get(f"/reports/{CLUSTER_ID}").status_code == 404


def test_get_cluster_reads_one_snapshot(monitor, poller, managed_cluster):
    monitor.add_cluster(managed_cluster)
    monitor.snapshot = MagicMock(wraps=monitor.snapshot)
    monitor.get_cluster = MagicMock(side_effect=AssertionError("registry read twice"))

    body = TestClient(create_app(monitor, poller)).get("/clusters/managed-cluster").json()

    assert body == {"namespace": "managed-cluster", "cluster_id": CLUSTER_ID, "needs_ccx": True}
    monitor.snapshot.assert_called_once_with()
