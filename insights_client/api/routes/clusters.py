from typing import Dict, List

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

router = APIRouter()


class ClusterInfo(BaseModel):
    namespace: str
    cluster_id: str
    needs_ccx: bool


class ClusterList(BaseModel):
    clusters: List[ClusterInfo]
    needs_ccx: Dict[str, bool]
    local_cluster: str


@router.get("/clusters", response_model=ClusterList)
def list_clusters(request: Request):
    snapshot = request.app.state.monitor.snapshot()
    return ClusterList(
        clusters=[
            ClusterInfo(
                namespace=c.namespace,
                cluster_id=c.cluster_id,
                needs_ccx=snapshot.needs_ccx.get(c.cluster_id, False),
            )
            for c in snapshot.clusters
        ],
        needs_ccx=snapshot.needs_ccx,
        local_cluster=snapshot.local_cluster,
    )


@router.get("/clusters/{namespace}", response_model=ClusterInfo)
def get_cluster(namespace: str, request: Request):
    snapshot = request.app.state.monitor.snapshot()
    for c in snapshot.clusters:
        if c.namespace == namespace:
            return ClusterInfo(
                namespace=c.namespace,
                cluster_id=c.cluster_id,
                needs_ccx=snapshot.needs_ccx.get(c.cluster_id, False),
            )
    raise HTTPException(status_code=404, detail=f"Cluster {namespace} not found")
