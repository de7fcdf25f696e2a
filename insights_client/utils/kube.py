import os
from pathlib import Path
from typing import Optional

from kubernetes import config
from kubernetes.config.config_exception import ConfigException


def load_kubeconfig(path: Optional[str] = None) -> str:
    """
    Load the kubeconfig from a given path, or the in-cluster service account
    when no path is given.
    Returns a description of the source used.
    """
    if path:
        resolved = Path(os.path.expanduser(path)).resolve()
        if not resolved.exists():
            raise FileNotFoundError(f"Kubeconfig not found: {resolved}")
        config.load_kube_config(config_file=str(resolved))
        return str(resolved)

    try:
        config.load_incluster_config()
    except ConfigException as e:
        raise ValueError(
            "No kubeconfig path provided and not running inside a cluster."
        ) from e
    return "in-cluster"
