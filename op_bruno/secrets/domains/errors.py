"""Error taxonomy for op-bruno.

Every error here is fatal to the current run. The CLI catches
``OpBrunoError`` at the top level, prints the message plus suggestions
and exits non-zero.
"""
from typing import List, Optional


class OpBrunoError(Exception):
    """Base error carrying user-facing remediation hints."""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None, ref: Optional[str] = None):
        self.message = message
        self.suggestions = list(suggestions or [])
        self.ref = ref
        super().__init__(message)


class NotFoundError(OpBrunoError):
    """A directory or file required to proceed does not exist."""


class MalformedFileError(OpBrunoError):
    """Input is structurally inconsistent (unterminated blocks, broken markers, bad JSON)."""


class ExternalToolError(OpBrunoError):
    """The 1Password CLI is missing, not signed in, or a command failed."""


class VaultAccessError(OpBrunoError):
    """The named vault cannot be reached or access is denied."""
