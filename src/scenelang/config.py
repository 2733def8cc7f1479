"""Command-line options loaded from a YAML file."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .scene import OUTPUT_FORMATS

CONFIG_FILENAME = "scenelang.yaml"


@dataclass
class InterpreterOptions:
    """How the CLI renders results."""

    output_format: str = "json"   # json | yaml
    indent: int = 2
    show_source: bool = True      # caret rendering in error output
    include_log: bool = True      # emit the final expression value

    def __post_init__(self) -> None:
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {OUTPUT_FORMATS}, got {self.output_format!r}"
            )
        if isinstance(self.indent, bool) or not isinstance(self.indent, int) or self.indent < 0:
            raise ValueError(f"indent must be a non-negative integer, got {self.indent!r}")
        for name in ("show_source", "include_log"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be true or false, got {getattr(self, name)!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterpreterOptions":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown option(s): {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_options(path: Optional[Path | str] = None) -> InterpreterOptions:
    """Load options from ``path``, or from ``./scenelang.yaml`` when it exists.

    An explicitly given path must exist; the default file is optional.
    """
    if path is None:
        config_path = Path.cwd() / CONFIG_FILENAME
        if not config_path.exists():
            return InterpreterOptions()
    else:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"config not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: expected a mapping of options")
    return InterpreterOptions.from_dict(data)


def save_options(options: InterpreterOptions, path: Path | str) -> None:
    with Path(path).open("w", encoding="utf-8") as fp:
        yaml.safe_dump(options.to_dict(), fp, sort_keys=False)
