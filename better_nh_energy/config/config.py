"""
Config loading and views for better-nh-energy.

- load_config(path, overrides):  shipped defaults + optional YAML file + dotlist
- nh_ceps_view(cfg):             source-level settings (url, providers, paths)
- nh_ceps_http_view(cfg):        HTTP adapter settings
- nh_ceps_retry_view(cfg):       retry settings
- load_nh_ceps_retry_policy(cfg): typed RetryPolicy
- logging_view(cfg):             logging settings

Views are resolved (``${...}`` interpolations expanded) and read-only.
"""

from __future__ import annotations

from importlib.resources import files as pkg_files
from pathlib import Path
from typing import Iterable, Optional, Sequence, cast

from omegaconf import DictConfig, OmegaConf

from better_nh_energy.common.retry import RetryPolicy

SOURCE_NH_CEPS = "nh_ceps"
CONFIG_PACKAGE = "better_nh_energy.config"
DEFAULT_CONFIG_NAME = "default.yaml"


class ConfigError(RuntimeError):
    pass


def load_config(
    path: Optional[Path] = None, overrides: Sequence[str] = ()
) -> DictConfig:
    """
    Compose the application config.

    Layers, later wins:
      1) the shipped ``default.yaml``
      2) an optional user YAML file at ``path``
      3) dotlist ``overrides`` such as ``"sources.nh_ceps.retry.attempts=1"``

    Raises:
        ConfigError: If ``path`` is given but does not exist.
    """
    shipped = (pkg_files(CONFIG_PACKAGE) / DEFAULT_CONFIG_NAME).read_text(
        encoding="utf-8"
    )
    layers = [OmegaConf.create(shipped)]

    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        layers.append(OmegaConf.load(path))

    if overrides:
        layers.append(OmegaConf.from_dotlist(list(overrides)))

    return cast(DictConfig, OmegaConf.merge(*layers))


def make_view(cfg: DictConfig, path: str) -> DictConfig:
    """Resolved, read-only copy of the subtree at dotted ``path``."""
    node = OmegaConf.select(cfg, path)
    if not isinstance(node, DictConfig):
        raise ConfigError(f"Missing config section: {path}")
    view = OmegaConf.create(OmegaConf.to_container(node, resolve=True))
    OmegaConf.set_readonly(view, True)
    return view


def nh_ceps_view(cfg: DictConfig) -> DictConfig:
    """Read-only view rooted at `sources.nh_ceps`."""
    return make_view(cfg, "sources.nh_ceps")


def nh_ceps_http_view(cfg: DictConfig) -> DictConfig:
    """Read-only view rooted at `sources.nh_ceps.http`."""
    return make_view(cfg, "sources.nh_ceps.http")


def nh_ceps_retry_view(cfg: DictConfig) -> DictConfig:
    """Read-only view rooted at `sources.nh_ceps.retry`."""
    return make_view(cfg, "sources.nh_ceps.retry")


def logging_view(cfg: DictConfig) -> DictConfig:
    """Read-only view rooted at `logging`."""
    return make_view(cfg, "logging")


def load_nh_ceps_retry_policy(cfg: DictConfig) -> RetryPolicy:
    """Convert the `sources.nh_ceps.retry` block into a `RetryPolicy`.

    Raises:
        ValueError: If attempts < 1 or a wait time is negative.
    """
    r = nh_ceps_retry_view(cfg)
    return RetryPolicy(
        attempts=int(r.attempts),
        wait_seconds=float(r.wait_seconds),
        max_wait_seconds=float(r.max_wait_seconds),
    )


def _must_have(d: DictConfig, path: str, keys: Iterable[str]) -> None:
    missing = [k for k in keys if k not in d]
    if missing:
        raise ConfigError(f"Missing keys at {path}: {', '.join(missing)}")


def ensure_nh_ceps_config(cfg: DictConfig) -> None:
    """Fail fast on an incomplete config tree."""
    src = nh_ceps_view(cfg)
    _must_have(
        src,
        "sources.nh_ceps",
        ("url", "providers", "output_dir", "output_filename", "logs_dir"),
    )
    if "{provider}" not in str(src.output_filename):
        raise ConfigError(
            "sources.nh_ceps.output_filename must contain a '{provider}' placeholder"
        )

    _must_have(
        nh_ceps_http_view(cfg),
        "sources.nh_ceps.http",
        ("user_agent", "default_timeout"),
    )
    _must_have(
        nh_ceps_retry_view(cfg),
        "sources.nh_ceps.retry",
        ("attempts", "wait_seconds", "max_wait_seconds"),
    )


__all__ = [
    "SOURCE_NH_CEPS",
    "ConfigError",
    "load_config",
    "make_view",
    "nh_ceps_view",
    "nh_ceps_http_view",
    "nh_ceps_retry_view",
    "logging_view",
    "load_nh_ceps_retry_policy",
    "ensure_nh_ceps_config",
]
