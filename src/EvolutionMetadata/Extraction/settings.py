# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.Extraction.settings",
#   "purpose": "Pydantic v2 settings for extraction jobs.",
#   "sections": [
#     {
#       "id": "loglevel",
#       "name": "LogLevel",
#       "anchor": "class-loglevel",
#       "kind": "class"
#     },
#     {
#       "id": "logformat",
#       "name": "LogFormat",
#       "anchor": "class-logformat",
#       "kind": "class"
#     },
#     {
#       "id": "sortindexpolicy",
#       "name": "SortIndexPolicy",
#       "anchor": "class-sortindexpolicy",
#       "kind": "class"
#     },
#     {
#       "id": "extractionsettings",
#       "name": "ExtractionSettings",
#       "anchor": "class-extractionsettings",
#       "kind": "class"
#     },
#     {
#       "id": "get-settings",
#       "name": "get_settings",
#       "anchor": "function-get-settings",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Pydantic v2 settings for extraction jobs.

All knobs are read from the environment with the ``EVOMETA_`` prefix and can
be overridden by keyword arguments (the CLI passes its flags this way), giving
the precedence CLI > ENV > defaults.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from EvolutionMetadata import __version__

__all__ = [
    "ExtractionSettings",
    "LogFormat",
    "LogLevel",
    "SortIndexPolicy",
    "get_settings",
    "reset_settings",
]


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Supported log output formats."""

    CONSOLE = "console"
    JSON = "json"


class SortIndexPolicy(str, Enum):
    """What to do when a reusable record moved within the source listing."""

    REEXTRACT = "reextract"  # treat the document as changed
    REINDEX = "reindex"  # reuse the record at the spec's current position


class ExtractionSettings(BaseSettings):
    """Settings shared by every extraction job."""

    model_config = SettingsConfigDict(
        env_prefix="EVOMETA_",
        case_sensitive=False,
        extra="ignore",
    )

    repository: str = Field(
        "swiftlang/swift-evolution", description="GitHub repository holding the proposals"
    )
    branch: str = Field("main", description="Branch whose head commit is extracted")
    proposals_path: str = Field("proposals", description="Directory of proposal files")
    api_base_url: str = Field("https://api.github.com", description="GitHub REST API root")
    previous_results_url: str = Field(
        "https://download.swift.org/swift-evolution/v1/evolution.json",
        description="Published metadata used to seed reuse",
    )
    github_token: Optional[str] = Field(None, description="Bearer token for API requests")
    max_workers: Optional[int] = Field(
        None, description="Upper bound on concurrent extractions (None: one per document)"
    )
    timeout_s: float = Field(30.0, description="Per-request HTTP timeout in seconds")
    retries: int = Field(3, ge=0, le=10, description="Retries for transient HTTP failures")
    user_agent: str = Field(
        f"evolution-metadata-extractor/{__version__}", description="HTTP User-Agent header"
    )
    log_level: LogLevel = Field(LogLevel.INFO, description="Root logging level")
    log_format: LogFormat = Field(LogFormat.CONSOLE, description="Console or structured JSON")
    sort_index_policy: SortIndexPolicy = Field(
        SortIndexPolicy.REEXTRACT,
        description="Handling of reusable records whose listing position changed",
    )
    tool_version: str = Field(__version__, description="Version stamped into the output")

    @field_validator("repository")
    @classmethod
    def _validate_repository(cls, value: str) -> str:
        owner, _, name = value.strip().partition("/")
        if not owner or not name or "/" in name:
            raise ValueError(f"repository must look like 'owner/name', got {value!r}")
        return f"{owner}/{name}"

    @field_validator("max_workers")
    @classmethod
    def _validate_max_workers(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("max_workers must be >= 1")
        return value

    @field_validator("timeout_s")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_s must be > 0")
        return value

    @property
    def contents_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/repos/{self.repository}/contents/{self.proposals_path}"

    @property
    def branch_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/repos/{self.repository}/branches/{self.branch}"


_settings: Optional[ExtractionSettings] = None


def get_settings() -> ExtractionSettings:
    """Get the lazily created process-wide settings instance."""

    global _settings
    if _settings is None:
        _settings = ExtractionSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings (for tests and CLI re-entry)."""

    global _settings
    _settings = None
