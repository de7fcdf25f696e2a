from fastapi import APIRouter, HTTPException, Request

router = APIRouter()


@router.get("/reports/{cluster_id}")
def get_report(cluster_id: str, request: Request):
    poller = request.app.state.poller
    report = poller.get_report(cluster_id) if poller is not None else None
    if report is None:
        raise HTTPException(status_code=404, detail=f"No report for cluster {cluster_id}")
    return report
