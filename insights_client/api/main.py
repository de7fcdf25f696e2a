from typing import Optional

from fastapi import FastAPI

from insights_client.api.routes import clusters, health, reports
from insights_client.monitor import ClusterMonitor
from insights_client.reports import ReportPoller


def create_app(monitor: ClusterMonitor, poller: Optional[ReportPoller] = None) -> FastAPI:
    app = FastAPI(title="insights-client")
    app.state.monitor = monitor
    app.state.poller = poller

    app.include_router(health.router)
    app.include_router(clusters.router)
    app.include_router(reports.router)
    return app
