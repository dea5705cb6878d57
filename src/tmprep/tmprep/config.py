"""Configuration for the template pipeline.

Values come from defaults, an optional YAML file and CLI flags (in that order
of precedence, lowest first). A config is immutable once built; the pipeline
receives it explicitly instead of reading process-wide state.

Example tmprep.yaml:

    src_dir: templates
    dist_dir: templates-dist
    css_path: templates/foundation-emails.css
    extension: .njk
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from tmprep.errors import ConfigError

DEFAULT_CONFIG_FILE = "tmprep.yaml"


class PrepConfig(BaseModel):
    """Pipeline configuration"""

    model_config = {"frozen": True}

    src_dir: Path = Field(default=Path("templates"), description="Template source root")
    dist_dir: Path = Field(
        default=Path("templates-dist"), description="Destination root"
    )
    css_path: Path | None = Field(
        default=Path("templates/foundation-emails.css"),
        description="Extra stylesheet inlined into every template",
    )
    template: str | None = Field(
        default=None, description="Process only this template (extension-stripped)"
    )
    extension: str = Field(default=".njk", description="Template file extension")
    private_prefix: str = Field(
        default="_", description="Files starting with this are never compiled"
    )
    excluded_name_parts: tuple[str, ...] = Field(
        default=("layout", "part"),
        description="Files whose name contains any of these are layouts or partials",
    )
    jobs: int = Field(default=1, ge=1, description="Templates processed in parallel")

    @classmethod
    def load(cls, path: Path) -> "PrepConfig":
        """Load config from yaml file, falling back to defaults."""
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e

    def with_overrides(self, **values: Any) -> "PrepConfig":
        """Return a copy with every non-None value applied."""
        updates = {k: v for k, v in values.items() if v is not None}
        if not updates:
            return self
        return self.model_validate({**self.model_dump(), **updates})

    def read_stylesheet(self) -> str:
        """Read the extra stylesheet, or return "" when none is configured."""
        if self.css_path is None:
            return ""
        if not self.css_path.is_file():
            raise ConfigError(f"Stylesheet not found: {self.css_path}")
        return self.css_path.read_text(encoding="utf-8")

    def template_file(self, name: str) -> str:
        """Loader name for an extension-stripped template name."""
        return f"{name}{self.extension}"

    def output_path(self, name: str) -> Path:
        return self.dist_dir / self.template_file(name)
