from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from KubeTabs.core.exceptions import ConfigurationError

log = logging.getLogger(__name__)


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from e


def _single_kubeconfig(value: str | None) -> str | None:
    # A KUBECONFIG list is left to the client library to merge.
    if not value or os.pathsep in value:
        return None
    return value


@dataclass(frozen=True)
class AppConfig:
    """Manages application-wide configuration settings."""

    kubeconfig: str | None = None
    context: str | None = None
    log_level: str = "INFO"
    log_file: str | None = None
    refresh_interval: float = 2.0
    request_timeout: float = 10.0
    default_namespace: str = "default"
    all_namespaces: bool = False
    wide: bool = False

    def __post_init__(self) -> None:
        if self.refresh_interval <= 0:
            raise ConfigurationError(
                f"refresh_interval must be positive, got {self.refresh_interval}"
            )
        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout must be positive, got {self.request_timeout}"
            )
        if self.kubeconfig and not Path(self.kubeconfig).expanduser().is_file():
            raise ConfigurationError(f"Kubeconfig path is not a file: {self.kubeconfig}")

    @property
    def tab_namespace(self) -> str | None:
        """The namespace new tabs start with; None means all namespaces."""
        return None if self.all_namespaces else self.default_namespace

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)

    @classmethod
    def from_env(
        cls, env: Mapping[str, str] | None = None, **overrides: Any
    ) -> AppConfig:
        """Reads settings from the environment, then applies non-None overrides."""
        env = os.environ if env is None else env
        config = cls(
            kubeconfig=_single_kubeconfig(env.get("KUBECONFIG")),
            context=env.get("KUBE_CONTEXT") or None,
            log_level=env.get("LOG_LEVEL") or "INFO",
            log_file=env.get("KUBETABS_LOG_FILE") or None,
            refresh_interval=_env_float(env, "KUBETABS_REFRESH_INTERVAL", 2.0),
            request_timeout=_env_float(env, "KUBETABS_REQUEST_TIMEOUT", 10.0),
            default_namespace=env.get("KUBETABS_NAMESPACE") or "default",
        )
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(config, **changes) if changes else config
