"""Configuration management for starship-setup."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, field_validator

from starship_setup.core.utils import validate_hash_string

logger = structlog.get_logger()

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "starship-setup" / "config.json"


class GitHubConfig(BaseModel):
    """GitHub Actions source of the game builds."""

    api_base: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )
    repository: str = Field(
        default="HarbourMasters/Starship",
        description="Repository in owner/name form"
    )
    branch: str = Field(default="main", description="Branch whose runs are installed")
    per_page: int = Field(default=15, description="Number of runs to inspect")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    allowed_events: list[str] = Field(
        default=["push"],
        description="Run trigger events whose artifacts may be installed"
    )
    binary_artifact: str = Field(
        default="Starship-linux",
        description="Artifact holding the Linux AppImage"
    )
    data_artifact: str = Field(
        default="starship.o2r",
        description="Artifact holding the game data archive"
    )

    @property
    def runs_url(self) -> str:
        """Workflow runs listing endpoint."""
        return f"{self.api_base.rstrip('/')}/repos/{self.repository}/actions/runs"

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str) -> str:
        """Validate owner/name form."""
        owner, _, name = v.partition("/")
        if not owner or not name or "/" in name:
            raise ValueError(f"Invalid repository: {v}. Expected owner/name")
        return v

    @field_validator("per_page")
    @classmethod
    def validate_per_page(cls, v: int) -> int:
        """Validate page size against the API limit."""
        if not 1 <= v <= 100:
            raise ValueError("per_page must be between 1 and 100")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout value."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("allowed_events")
    @classmethod
    def validate_allowed_events(cls, v: list[str]) -> list[str]:
        """Validate allowed events list."""
        if not v:
            raise ValueError("Allowed events list cannot be empty")
        return v


class PackerConfig(BaseModel):
    """Torch asset packer settings."""

    download_url: str = Field(
        default="https://github.com/HarbourMasters/Torch/releases/latest/download/torch",
        description="Latest Torch release binary"
    )
    mode: str = Field(default="o2r", description="Torch mode argument")
    timeout: float = Field(default=120.0, description="Download timeout in seconds")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout value."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class SetupConfig(BaseModel):
    """Application configuration."""

    default_install_dir: Path = Field(
        default=Path.home() / "Games" / "StarFox64PC",
        description="Installation directory offered at the prompt"
    )

    # Version string components
    product: str = Field(default="starship", description="Product prefix of the version string")
    arch: str = Field(default="x86_64", description="Architecture tag")
    os_tag: str = Field(default="linux", description="Operating system tag")

    # ROM verification
    rom_extension: str = Field(default=".z64", description="ROM file extension")
    rom_sha1: str = Field(
        default="09f0d105f476b00efa5303a3ebc42e60a7753b7a",
        description="SHA-1 of the supported ROM"
    )

    log_level: str = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    packer: PackerConfig = Field(default_factory=PackerConfig)

    @classmethod
    def load(cls, config_file: Path | None = None) -> SetupConfig:
        """Load configuration from file.

        Args:
            config_file: Path to config file, uses default if None

        Returns:
            Application configuration
        """
        if config_file is None:
            config_file = DEFAULT_CONFIG_FILE

        if config_file.exists():
            with open(config_file) as f:
                data = json.load(f)
                return cls(**data)

        return cls()

    def save(self, config_file: Path | None = None) -> None:
        """Save configuration to file.

        Args:
            config_file: Path to config file, uses default if None
        """
        if config_file is None:
            config_file = DEFAULT_CONFIG_FILE

        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

        logger.info("config_saved", path=str(config_file))

    @field_validator("rom_sha1")
    @classmethod
    def validate_rom_sha1(cls, v: str) -> str:
        """Validate and normalize the ROM digest."""
        if not validate_hash_string(v, length=40):
            raise ValueError(f"Invalid SHA-1 digest: {v}")
        return v.lower()

    @field_validator("rom_extension")
    @classmethod
    def validate_rom_extension(cls, v: str) -> str:
        """Validate ROM extension."""
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"Invalid ROM extension: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {valid_levels}")
        return v
