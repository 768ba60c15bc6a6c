"""Shared CLI helpers."""

import dataclasses
import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from ..config import load_config
from ..enhancers import RuntimeContext
from ..logging_config import setup_logging

console = Console()

RISK_STYLES = {
    "low-risk": "green",
    "medium-risk": "yellow",
    "high-risk": "red",
    "critical": "bold red",
}

GAP_STYLES = {
    "low": "green",
    "medium": "yellow",
    "high": "red",
    "critical": "bold red",
}


def project_path(ctx: typer.Context, override: Optional[Path] = None) -> Path:
    """Directory the command works on: *override*, then ``--path``, then cwd."""
    if override is not None:
        return override.resolve()
    obj = ctx.obj or {}
    return Path(obj.get("path") or Path.cwd()).resolve()


def resolve_context(
    ctx: typer.Context,
    verbose: bool = False,
    **overrides: Any,
) -> RuntimeContext:
    """Load configuration, set up logging and probe enhancers."""
    obj = ctx.obj or {}
    config = load_config(config_file=obj.get("config"), verbose=verbose or None, **overrides)
    setup_logging(config.verbosity, config.log_file)
    return RuntimeContext.create(config)


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def emit_json(payload: Any) -> None:
    """Print a payload (dataclasses allowed at any depth) as indented JSON on stdout."""
    print(json.dumps(payload, indent=2, default=_json_default))


def risk_text(label: str) -> str:
    style = RISK_STYLES.get(label, "white")
    return f"[{style}]{label}[/{style}]"


def gap_text(gap_type: str) -> str:
    style = GAP_STYLES.get(gap_type, "white")
    return f"[{style}]{gap_type}[/{style}]"
