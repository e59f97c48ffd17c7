"""Core functionality for starship_setup.

- config: Configuration management
- paths: Installation directory layout
- github: Build resolution from GitHub Actions
- manual_fetch, installer, packer: The install steps
- layout: Legacy layout migrations
- prompts: Operator interaction
- workflow: The full install / update sequence
"""

from starship_setup.core.config import GitHubConfig, PackerConfig, SetupConfig
from starship_setup.core.paths import InstallPaths
from starship_setup.core.version import VersionRecord
from starship_setup.core.workflow import SetupOutcome, SetupWorkflow

__all__ = [
    "GitHubConfig",
    "PackerConfig",
    "SetupConfig",
    "InstallPaths",
    "VersionRecord",
    "SetupOutcome",
    "SetupWorkflow",
]
