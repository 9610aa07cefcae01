"""Configuration loading and defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "linkauto"
_DEFAULT_CONFIG_PATH = _DEFAULT_CONFIG_DIR / "config.yaml"

OUTPUT_FORMATS = ("json", "markdown")


@dataclass
class Config:
    definitions_path: Path
    output_dir: Path = field(default_factory=lambda: Path("linked"))
    output_format: str = "json"
    site_url: str | None = None
    exclude_patterns: list[str] = field(default_factory=list)
    exclude_targets: list[str] = field(default_factory=list)
    max_workers: int = 0
    regexps_max: int = 32
    keep_skipped_spans: bool = False
    link_headings: bool = False

    @property
    def workers(self) -> int | None:
        """Filter parallelism; None means one thread per CPU."""
        return self.max_workers if self.max_workers > 0 else None


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file, falling back to defaults where possible.

    Relative paths in the file are resolved against the file's directory.
    """
    path = config_path or _DEFAULT_CONFIG_PATH
    path = Path(path).expanduser()

    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            f"Create one at {_DEFAULT_CONFIG_PATH} or pass --config.\n"
            f"See config.example.yaml for reference."
        )

    raw = yaml.safe_load(path.read_text())
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"Invalid config file: {path}")

    if "definitions_path" not in raw:
        raise ValueError("'definitions_path' is required in config")

    base = path.parent

    def resolve(value: str) -> Path:
        p = Path(value).expanduser()
        return p if p.is_absolute() else base / p

    kwargs: dict = {
        "definitions_path": resolve(raw["definitions_path"]),
        "output_dir": resolve(raw.get("output_dir", "linked")),
    }

    if "output_format" in raw:
        if raw["output_format"] not in OUTPUT_FORMATS:
            raise ValueError(
                f"'output_format' must be one of {', '.join(OUTPUT_FORMATS)}, "
                f"got {raw['output_format']!r}"
            )
        kwargs["output_format"] = raw["output_format"]
    for key in ("exclude_patterns", "exclude_targets"):
        if key in raw:
            kwargs[key] = [str(v) for v in raw[key] or []]
    for key in (
        "site_url",
        "max_workers",
        "regexps_max",
        "keep_skipped_spans",
        "link_headings",
    ):
        if key in raw:
            kwargs[key] = raw[key]

    return Config(**kwargs)
