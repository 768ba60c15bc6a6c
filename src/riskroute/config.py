"""Configuration loading and management for riskroute.

Configuration sources are merged in priority order:
    1. Defaults (defined in RiskRouteConfig)
    2. Global config (~/.riskroute.toml)
    3. Project config (./riskroute.toml)
    4. Explicit config file
    5. Environment variables (RISKROUTE_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(coverage_threshold=70)
    >>> config.coverage_threshold
    70
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

GLOBAL_CONFIG_NAME = ".riskroute.toml"
PROJECT_CONFIG_NAME = "riskroute.toml"
ENV_PREFIX = "RISKROUTE_"

# Values loaded from TOML arrive untyped; ints are accepted where floats are.
_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "default_ref": (str,),
    "git_timeout_seconds": (int,),
    "coverage_threshold": (int, float),
    "route_gap_limit": (int,),
    "suggest_limit": (int,),
    "group_by_agent": (bool,),
    "use_enhancers": (bool,),
    "router_timeout_seconds": (int, float),
    "verbosity": (str,),
    "log_file": (str, type(None)),
}


def _has_type(value: Any, expected: tuple[type, ...]) -> bool:
    if isinstance(value, bool) and bool not in expected:
        return False
    return isinstance(value, expected)


@dataclass(frozen=True)
class RiskRouteConfig:
    """Settings shared by diff analysis, coverage analysis and routing.

    Attributes:
        Diff analysis:
            default_ref: Ref expression analysed when none is given
            git_timeout_seconds: Ceiling for each git query

        Coverage analysis:
            coverage_threshold: Files whose mean coverage is below this are gaps
            route_gap_limit: Gaps included in a coverage-route payload
            suggest_limit: Suggestions included in a coverage-suggest payload
            group_by_agent: Build the agent -> files grouping for coverage-gaps

        Enhancers:
            use_enhancers: Probe for optional structure analyzers and learned routers
            router_timeout_seconds: Ceiling for one learned-router call

        Output control:
            verbosity: Logging verbosity level
            log_file: Also write DEBUG logs to this file
    """

    default_ref: str = "HEAD~1"
    git_timeout_seconds: int = 30

    coverage_threshold: float = 80.0
    route_gap_limit: int = 10
    suggest_limit: int = 20
    group_by_agent: bool = True

    use_enhancers: bool = True
    router_timeout_seconds: float = 5.0

    verbosity: Verbosity = "normal"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        for name, expected in _FIELD_TYPES.items():
            value = getattr(self, name)
            if not _has_type(value, expected):
                raise InvalidConfigError(
                    name, value, f"expected {' or '.join(t.__name__ for t in expected)}"
                )
        if not self.default_ref.strip():
            raise InvalidConfigError("default_ref", self.default_ref, "must not be empty")
        if self.git_timeout_seconds < 1:
            raise InvalidConfigError(
                "git_timeout_seconds", self.git_timeout_seconds, "must be at least 1"
            )
        if not 0.0 <= self.coverage_threshold <= 100.0:
            raise InvalidConfigError(
                "coverage_threshold", self.coverage_threshold, "must be between 0 and 100"
            )
        if self.route_gap_limit < 1:
            raise InvalidConfigError("route_gap_limit", self.route_gap_limit, "must be at least 1")
        if self.suggest_limit < 1:
            raise InvalidConfigError("suggest_limit", self.suggest_limit, "must be at least 1")
        if self.router_timeout_seconds <= 0:
            raise InvalidConfigError(
                "router_timeout_seconds", self.router_timeout_seconds, "must be positive"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )


DEFAULT_CONFIG = RiskRouteConfig()


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> RiskRouteConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options do not mask lower layers.

    Returns:
        Validated RiskRouteConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing, or a key is unknown
        InvalidConfigError: If a value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / GLOBAL_CONFIG_NAME
    if global_config.exists():
        merged.update(_load_toml_section(global_config))

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        merged.update(_load_toml_section(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_section(config_file))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides.pop("verbose"):
            overrides["verbosity"] = "verbose"
    if "quiet" in overrides:
        if overrides.pop("quiet"):
            overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return RiskRouteConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_toml_section(path: Path) -> dict[str, Any]:
    """Read a TOML file, accepting either top-level keys or a [riskroute] table."""
    try:
        data = _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
    section = data.get("riskroute", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"Invalid config file '{path}': [riskroute] must be a table")
    return dict(section)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from RISKROUTE_* environment variables.

    Every RiskRouteConfig field can be set, e.g. RISKROUTE_COVERAGE_THRESHOLD=70
    or RISKROUTE_USE_ENHANCERS=false.
    """
    type_hints = get_type_hints(RiskRouteConfig)
    result: dict[str, Any] = {}

    for field_name in RiskRouteConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(field_name, env_value, f"{env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type."""
    origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal or type_hint == Optional[str]:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
