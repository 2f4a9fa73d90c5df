"""Runtime configuration using Pydantic settings."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENGINE = "grep"


class Settings(BaseSettings):
    """Central application settings, overridable through ``GF_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="GF_")

    pattern_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding one JSON file per pattern. Defaults to ~/.config/gf or ~/.gf.",
    )
    default_engine: str = Field(
        default=DEFAULT_ENGINE,
        description="Engine used when neither the pattern nor the command line names one.",
    )

    def resolve_pattern_dir(self) -> Path:
        """
        Return the pattern directory.

        An explicit ``pattern_dir`` wins. Otherwise ``~/.config/gf`` is used when it
        already exists and ``~/.gf`` when it does not, so existing pattern
        collections keep working.
        """
        if self.pattern_dir is not None:
            return self.pattern_dir.expanduser()

        home = Path.home()
        config_dir = home / ".config" / "gf"
        if config_dir.exists():
            return config_dir
        return home / ".gf"


__all__ = ["DEFAULT_ENGINE", "Settings"]
