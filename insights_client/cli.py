import logging
import sys
import threading
from typing import Optional

import typer
import uvicorn
import yaml
from kubernetes import client

from insights_client.api import create_app
from insights_client.config import Config, get_config, set_config
from insights_client.logging import setup_logger
from insights_client.monitor import ClusterLookup, ClusterMonitor, ClusterWatcher
from insights_client.reports import ReportClient, ReportPoller
from insights_client.utils.kube import load_kubeconfig

app = typer.Typer(help="Track hub clusters and poll their insights reports.")

debug_mode = False


def setup_logging(debug: bool = False, level: str = "INFO"):
    """Configure logging based on debug mode."""
    setup_logger("insights_client", logging.DEBUG if debug else level)


def _connect(config: Config, kubeconfig: Optional[str]) -> ClusterLookup:
    source = load_kubeconfig(kubeconfig or config.kube_config or None)
    logging.getLogger(__name__).info("Using kubeconfig: %s", source)
    return ClusterLookup(client.CustomObjectsApi())


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """insights-client - cluster monitor for insights reports."""
    global debug_mode
    debug_mode = debug
    config = Config.load()
    set_config(config)
    setup_logging(debug, config.log_level)
    if debug:
        logging.debug("Debug mode enabled")


@app.command("run")
def run_command(
    kubeconfig: Optional[str] = typer.Option(None, help="Path to the hub kubeconfig"),
):
    """Watch the hub's clusters, poll their reports and serve the status API."""
    config = get_config()
    lookup = _connect(config, kubeconfig)

    monitor = ClusterMonitor()
    watcher = ClusterWatcher(monitor, lookup)
    poller = ReportPoller(monitor, ReportClient(config), config)
    stop_event = threading.Event()

    threading.Thread(target=watcher.run, args=(stop_event,), name="cluster-watch", daemon=True).start()
    threading.Thread(target=poller.run, args=(stop_event,), name="report-poller", daemon=True).start()

    host, port = config.listen_address()
    try:
        uvicorn.run(create_app(monitor, poller), host=host, port=port, log_level="info")
    finally:
        stop_event.set()
        watcher.stop()


@app.command("clusters")
def clusters_command(
    kubeconfig: Optional[str] = typer.Option(None, help="Path to the hub kubeconfig"),
):
    """List the hub's clusters with their IDs and report needs."""
    config = get_config()
    monitor = ClusterMonitor()
    ClusterWatcher(monitor, _connect(config, kubeconfig)).resync()

    snapshot = monitor.snapshot()
    typer.echo(yaml.safe_dump(
        [
            {
                "namespace": c.namespace,
                "clusterID": c.cluster_id,
                "needsCCX": snapshot.needs_ccx.get(c.cluster_id, False),
            }
            for c in snapshot.clusters
        ],
        sort_keys=False,
    ))


@app.command("config")
def config_command():
    """Show the effective configuration."""
    typer.echo(yaml.safe_dump(get_config().redacted(), sort_keys=False))


if __name__ == "__main__":
    try:
        app()
    except Exception as e:
        if debug_mode:
            import traceback
            logging.error(f"Unhandled exception: {e}\n{traceback.format_exc()}")
        else:
            logging.error(f"Error: {e}")
        sys.exit(1)
