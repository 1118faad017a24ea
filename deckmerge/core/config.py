from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Deck Merge API"
    app_version: str = "0.1.0"

    host: str = "0.0.0.0"
    port: int = 3000

    base_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    public_dir: Optional[Path] = None
    output_dir: Optional[Path] = None
    upload_dir: Optional[Path] = None

    upload_field: str = "files"
    document_extension: str = ".pptx"
    slide_numbering: Literal["dense", "listed"] = "dense"
    cleanup_uploads: bool = True
    log_level: str = "INFO"

    allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    def configure_paths(self) -> None:
        """Resolve default directories and create any that are missing."""
        self.public_dir = (self.public_dir or (self.base_dir / "public")).resolve()
        self.output_dir = (self.output_dir or (self.public_dir / "output")).resolve()
        self.upload_dir = (self.upload_dir or (self.base_dir / "uploads")).resolve()

        for directory in (self.public_dir, self.output_dir, self.upload_dir):
            directory.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
