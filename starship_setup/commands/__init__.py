"""CLI command implementations for starship_setup.

- install: interactive install or update (the default command)
- status: installed vs latest version
- instructions: Steam setup steps
"""

from starship_setup.commands.install import install
from starship_setup.commands.instructions import instructions
from starship_setup.commands.status import status

__all__ = ["install", "instructions", "status"]
