from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/liveness")
def liveness():
    return {"status": "OK"}


@router.get("/readiness")
def readiness(request: Request):
    return {"status": "OK", "clusters": len(request.app.state.monitor)}
