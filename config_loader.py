"""Configuration loader for the subtitle overlay."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import yaml  # type: ignore
except ModuleNotFoundError as exc:  # pragma: no cover - import guard
    raise RuntimeError(
        "PyYAML is required. Please install it with `pip install pyyaml`."
    ) from exc


@dataclass
class AppConfig:
    """Wrapper around raw configuration with resolved paths."""

    raw: Dict[str, Any]
    config_path: Path
    project_root: Path
    log_file: Optional[Path]

    @property
    def logging_level(self) -> str:
        logging_cfg = self.raw.get("logging", {})
        if not isinstance(logging_cfg, dict):
            return "INFO"
        level = logging_cfg.get("level") or logging_cfg.get("LEVEL") or "INFO"
        return str(level).upper()

    @property
    def render(self) -> Dict[str, Any]:
        render_cfg = self.raw.get("render", {})
        return render_cfg if isinstance(render_cfg, dict) else {}

    def to_debug_dict(self) -> Dict[str, Any]:
        return {
            "config_path": str(self.config_path),
            "project_root": str(self.project_root),
            "log_file": str(self.log_file) if self.log_file else None,
            "logging_level": self.logging_level,
        }

    def dumps(self) -> str:
        """Return a JSON string for diagnostics."""
        return json.dumps(self.to_debug_dict(), ensure_ascii=False, indent=2)


def load_config(path: Path | str, project_root: Path | None = None) -> AppConfig:
    """Load YAML config and resolve the log file location."""
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")

    root = project_root.resolve() if project_root else config_path.parent

    logging_cfg = raw.get("logging", {})
    log_file_name = logging_cfg.get("file") if isinstance(logging_cfg, dict) else None
    log_file = (root / log_file_name).resolve() if log_file_name else None

    return AppConfig(
        raw=raw,
        config_path=config_path,
        project_root=root,
        log_file=log_file,
    )
