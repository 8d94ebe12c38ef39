"""
Exit codes for the layerconf CLI.

``get`` and ``explain`` exit with EXIT_ERROR when the key is not resolved, so a
script can tell that apart from EXIT_CONFIG_ERROR: a bad ``-D`` definition or
a bootstrap file that cannot be read.
"""

from typing import Optional

import typer

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2


class CliExit(typer.Exit):
    """typer.Exit that prints its message before the process exits."""

    def __init__(self, code: int, message: Optional[str] = None):
        self.message = message
        super().__init__(code)
        if message:
            print(message)

    @classmethod
    def error(cls, message: str) -> "CliExit":
        """The requested key is not in the resolved configuration."""
        return cls(EXIT_ERROR, message)

    @classmethod
    def config_error(cls, message: str) -> "CliExit":
        """Resolution could not start from the given options."""
        return cls(EXIT_CONFIG_ERROR, message)
