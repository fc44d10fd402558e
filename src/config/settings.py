"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use MDPREP_ prefix (e.g., MDPREP_STRICT_MODE=true).

Settings can also be loaded from a .env file in the project root.

These are defaults only: the passes never read this module directly, they
receive an explicit PipelineConfig built from it (see models/context.py).
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use MDPREP_ prefix.

    Examples:
        MDPREP_INDEX_NAME=README.md
        MDPREP_DOCUMENT_GLOB=guides/**/*.md
        MDPREP_STRICT_MODE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="MDPREP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Link normalization
    index_name: str = Field(
        default="index.md",
        description="File name of documents served as their directory's index",
    )

    document_suffix: str = Field(
        default=".md",
        description="Suffix identifying links to other documents",
    )

    external_prefixes: List[str] = Field(
        default_factory=lambda: ["http://", "https://"],
        description="URL prefixes that are never rewritten",
    )

    # Input handling
    encoding: str = Field(
        default="utf-8",
        description="Encoding used to read documents and included files",
    )

    document_glob: str = Field(
        default="**/*.md",
        description="Glob (relative to the content root) selecting documents to process",
    )

    strict_mode: bool = Field(
        default=False,
        description="Strict mode: fail the run if any directive was left unexpanded",
    )


# Singleton instance - import this in your code
appsettings = AppSettings()
