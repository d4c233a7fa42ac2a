"""Configuration loading for spmsift (.spmsift.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".spmsift.yml"
TOOLCHAIN_ENV_VAR = "SPMSIFT_TOOLCHAIN"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ToolchainConfig:
    """How the Swift toolchain is invoked."""

    executable: str = "swift"
    timeout: float = 60.0
    output_lines: int = 50


@dataclass
class RulesConfig:
    """Location of a replacement rule table document."""

    path: Optional[Path] = None


@dataclass
class RouterConfig:
    """Reading router settings."""

    case_studies_dir: Optional[Path] = None


@dataclass
class SiftConfig:
    """Represents the high-level settings defined in .spmsift.yml."""

    root: Path
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    router: RouterConfig = field(default_factory=RouterConfig)
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> SiftConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        config = SiftConfig(root=root)
        _apply_env_overrides(config)
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    toolchain_data = _as_dict(data.get("toolchain"))
    toolchain = ToolchainConfig()
    if toolchain_data:
        toolchain.executable = _as_str(toolchain_data.get("executable")) or toolchain.executable
        timeout = _as_float(toolchain_data.get("timeout"))
        if timeout is not None and timeout > 0:
            toolchain.timeout = timeout
        output_lines = _as_int(toolchain_data.get("output_lines"))
        if output_lines is not None and output_lines > 0:
            toolchain.output_lines = output_lines

    rules_data = _as_dict(data.get("rules"))
    rules_path = _as_str(rules_data.get("path")) if rules_data else None
    rules = RulesConfig(path=root / rules_path if rules_path else None)

    router_data = _as_dict(data.get("router"))
    case_dir = _as_str(router_data.get("case_studies_dir")) if router_data else None
    router = RouterConfig(case_studies_dir=root / case_dir if case_dir else None)

    config = SiftConfig(
        root=root,
        toolchain=toolchain,
        rules=rules,
        router=router,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )
    _apply_env_overrides(config)
    return config


def _apply_env_overrides(config: SiftConfig) -> None:
    executable = os.environ.get(TOOLCHAIN_ENV_VAR)
    if executable and executable.strip():
        config.toolchain.executable = executable.strip()


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
