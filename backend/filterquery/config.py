"""
Filter settings.

Settings can be built directly or loaded from YAML, e.g.::

    max_predicates: 26
    keyword_operators: true
    filters:
      errors: "Level==Error && !Source==Net"
      gc: "EventName==GC/Start || EventName==GC/Stop"
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FilterSettings(BaseModel):
    """Compilation settings plus named filter expressions."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_predicates: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum distinct predicates per expression (None = unbounded)",
    )
    keyword_operators: bool = Field(
        default=True,
        description="Accept AND/OR/NOT in addition to &&, || and !",
    )
    filters: Dict[str, str] = Field(default_factory=dict)

    @field_validator("filters")
    @classmethod
    def validate_filters(cls, v: Dict[str, str]) -> Dict[str, str]:
        for name, expression in v.items():
            if not name.strip():
                raise ValueError("Filter names must not be empty")
            if not expression.strip():
                raise ValueError(f"Filter '{name}' has an empty expression")
        return v

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "FilterSettings":
        """Load settings from YAML content."""
        data = yaml.safe_load(yaml_content) or {}
        return cls.model_validate(data)


def load_settings(path: Union[str, Path]) -> FilterSettings:
    """
    Load settings from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If the content is not valid settings.
    """
    with open(path, "r", encoding="utf-8") as f:
        return FilterSettings.from_yaml(f.read())
