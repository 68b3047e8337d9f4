"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

from mdctx.core.lsp import LspStrategy


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:      str = "mdctx"
    narrow:        bool = Field(default=False, description="Restrict the edit view to the editable region")
    lsp_strategy:  LspStrategy = Field(default=LspStrategy.eglot, description="eglot or lsp-mode")
    staging_dir:   Optional[str] = Field(default=None, description="Base dir for tangle targets; None = document dir")
    parser_config: str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    context_bg:    str = Field(default="bright_black", description="Background colour for protected context")
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDCTX_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"MDCTX_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValueError as e:
        raise ValueError(f"Invalid settings: {e}") from e
