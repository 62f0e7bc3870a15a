"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from slipsmith.engine.edge import EdgeConfig
    from slipsmith.engine.projection import ProjectionConfig
    from slipsmith.engine.slip import SlipConfig

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    directory = _find_config_dir(config_dir)
    default_path = directory / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = directory / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        storage: dict[str, Any] | None = None,
        providers: dict[str, Any] | None = None,
        projection: dict[str, Any] | None = None,
        edge: dict[str, Any] | None = None,
        slip: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.storage = storage or {}
        self.providers = providers or {}
        self.projection = projection or {}
        self.edge = edge or {}
        self.slip = slip or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            storage=raw.get("storage"),
            providers=raw.get("providers"),
            projection=raw.get("projection"),
            edge=raw.get("edge"),
            slip=raw.get("slip"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def db_path(self) -> str:
        return os.environ.get("SLIPSMITH_DB_PATH") or self.storage.get("db_path", "data/slipsmith.duckdb")

    @property
    def provider_mode(self) -> str:
        mode = os.environ.get("SLIPSMITH_PROVIDER_MODE") or self.providers.get("mode", "mock")
        return str(mode).lower()

    @property
    def use_mock_data(self) -> bool:
        return self.provider_mode == "mock"

    @property
    def provider_base_url(self) -> str:
        return self.providers.get("base_url", "http://127.0.0.1:9000")

    @property
    def provider_api_key(self) -> str | None:
        return os.environ.get("SLIPSMITH_API_KEY") or self.providers.get("api_key") or None

    @property
    def provider_timeout_sec(self) -> float:
        return float(self.providers.get("timeout_sec", 15.0))

    @property
    def mock_seed(self) -> int:
        return int(self.providers.get("mock_seed", 7))

    @property
    def default_limit(self) -> int:
        return int(self.slip.get("default_limit", 20))

    @property
    def min_probability(self) -> float:
        return float(self.slip.get("min_probability", 0.60))

    @property
    def league_minimums(self) -> dict[str, int]:
        raw = self.slip.get("league_minimums") or {"NBA": 30, "NFL": 15, "default": 20}
        return {str(k).upper() if k != "default" else k: int(v) for k, v in raw.items()}

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)

    def projection_config(self) -> ProjectionConfig:
        from slipsmith.engine.projection import ProjectionConfig

        p = self.projection
        return ProjectionConfig(
            lookback_games=int(p.get("lookback_games", 10)),
            recency_weight=float(p.get("recency_weight", 1.5)),
            home_advantage=float(p.get("home_advantage", 0.03)),
            player_home_factor=float(p.get("player_home_factor", 0.02)),
            min_confidence=float(p.get("min_confidence", 0.5)),
        )

    def edge_config(self) -> EdgeConfig:
        from slipsmith.engine.edge import EdgeConfig

        e = self.edge
        return EdgeConfig(
            min_edge=float(e.get("min_edge", 0.5)),
            edge_weight=float(e.get("edge_weight", 0.5)),
            confidence_weight=float(e.get("confidence_weight", 0.3)),
            reliability_weight=float(e.get("reliability_weight", 0.2)),
        )

    def slip_config(self) -> SlipConfig:
        from slipsmith.engine.slip import SlipConfig

        minimums = self.league_minimums
        default_minimum = minimums.pop("default", 20)
        return SlipConfig(
            default_limit=self.default_limit,
            min_probability=self.min_probability,
            league_minimums=minimums,
            default_minimum=default_minimum,
        )


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import sys

    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        # Stream is re-resolved after every configure() call.
        cache_logger_on_first_use=False,
    )
