"""Configuration management for the insights client.

Every option is resolved from an environment override or a built-in default:
1. Environment variable (a ``.env`` file is loaded first, if present)
2. Value already set on the instance
3. Default value
"""
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .exceptions import ConfigParseError
from .utils import redact_sensitive_data

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_PORT = ":3030"
DEFAULT_HTTP_TIMEOUT = 180000  # 3 minutes
DEFAULT_USE_MOCK = False
DEFAULT_CCX_SERVER = "http://localhost:8080/api/v1/clusters"  # For local use only
DEFAULT_POLL_INTERVAL = 10  # minutes
DEFAULT_REQUEST_INTERVAL = 3  # seconds
DEFAULT_LOG_LEVEL = "INFO"

_TRUE_VALUES = ("1", "t", "T", "TRUE", "true", "True")
_FALSE_VALUES = ("0", "f", "F", "FALSE", "false", "False")

MESSAGE = "Using %s from environment: %s"


def default_kubeconfig_path() -> str:
    """Return ~/.kube/config if it exists, otherwise an empty string."""
    path = Path(os.environ.get("HOME", "~")).expanduser() / ".kube" / "config"
    return str(path) if path.exists() else ""


def parse_int(env: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as e:
        raise ConfigParseError(env, value, "an integer") from e


def parse_bool(env: str, value: str) -> bool:
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigParseError(env, value, "a boolean")


class Config(BaseModel):
    """Insights client configuration.

    Fields left as None are unset; ``apply_environment`` fills them.
    """
    service_port: Optional[str] = Field(default=None, description="Address the status API listens on")
    http_timeout: Optional[int] = Field(default=None, description="Report service timeout in milliseconds")
    use_mock: Optional[bool] = Field(default=None, description="Serve canned reports instead of calling the report service")
    ccx_server: Optional[str] = Field(default=None, description="Report service base URL")
    ccx_token: Optional[str] = Field(default=None, description="Token used to access the report service")
    kube_config: Optional[str] = Field(default=None, description="Local kubeconfig path")
    poll_interval: Optional[int] = Field(default=None, description="Minutes between two polling cycles")
    request_interval: Optional[int] = Field(default=None, description="Seconds between two report requests")
    log_level: Optional[str] = Field(default=None, description="Logging level")

    @classmethod
    def load(cls, environ: Optional[Mapping[str, str]] = None, dotenv: bool = True, **values: Any) -> 'Config':
        """Create a configuration from the environment and the built-in defaults."""
        if dotenv and environ is None:
            load_dotenv()
        config = cls(**values)
        config.apply_environment(os.environ if environ is None else environ)
        return config

    def apply_environment(self, environ: Mapping[str, str]) -> None:
        self._set_default("service_port", "SERVICE_PORT", DEFAULT_SERVICE_PORT, environ)
        self._set_default("ccx_server", "CCX_SERVER", DEFAULT_CCX_SERVER, environ)
        self._set_default("ccx_token", "CCX_TOKEN", "", environ, secret=True)
        self._set_default("log_level", "LOG_LEVEL", DEFAULT_LOG_LEVEL, environ)
        self._set_default("kube_config", "KUBECONFIG", default_kubeconfig_path(), environ)
        self._set_default_parsed("http_timeout", "HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT, environ, parse_int)
        self._set_default_parsed("poll_interval", "POLL_INTERVAL", DEFAULT_POLL_INTERVAL, environ, parse_int)
        self._set_default_parsed("request_interval", "REQUEST_INTERVAL", DEFAULT_REQUEST_INTERVAL, environ, parse_int)
        self._set_default_parsed("use_mock", "USE_MOCK", DEFAULT_USE_MOCK, environ, parse_bool)

    def _set_default(self, field: str, env: str, default: str, environ: Mapping[str, str], secret: bool = False) -> None:
        val = environ.get(env, "")
        if val:
            logger.debug(MESSAGE, env, "[REDACTED]" if secret else val)
            setattr(self, field, val)
        elif getattr(self, field) is None:
            if default:
                logger.debug("%s not set, using default value: %s", env, default)
            setattr(self, field, default)

    def _set_default_parsed(
        self,
        field: str,
        env: str,
        default: Any,
        environ: Mapping[str, str],
        parse: Callable[[str, str], Any],
    ) -> None:
        val = environ.get(env, "")
        if val:
            logger.info(MESSAGE, env, val)
            try:
                setattr(self, field, parse(env, val))
                return
            except ConfigParseError as e:
                logger.error("%s. Keeping %s", e, getattr(self, field) if getattr(self, field) is not None else default)
        if getattr(self, field) is None:
            logger.debug("No %s from environment, using default value: %s", env, default)
            setattr(self, field, default)

    def listen_address(self) -> Tuple[str, int]:
        """Split ``service_port`` (``[host]:port``) into host and port."""
        host, _, port = (self.service_port or DEFAULT_SERVICE_PORT).rpartition(":")
        return host or "0.0.0.0", int(port)

    @property
    def http_timeout_seconds(self) -> float:
        return (self.http_timeout or DEFAULT_HTTP_TIMEOUT) / 1000.0

    def redacted(self) -> Dict[str, Any]:
        """Return the configuration as a dict with secrets masked."""
        return redact_sensitive_data(self.model_dump())


# Process-wide default, set by the CLI
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the process-wide configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def set_config(config: Optional[Config]) -> None:
    """Set the process-wide configuration instance."""
    global _config
    _config = config
