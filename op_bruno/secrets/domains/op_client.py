"""Vault client interface and its 1Password CLI implementation.

The 1Password CLI (``op``) is treated as an opaque collaborator: it must be
installed and signed in, and every call is a blocking subprocess with JSON
output. Tests substitute a fake ``VaultClient``.
"""
import json
import logging
import os
import subprocess
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import ExternalToolError, VaultAccessError

logger = logging.getLogger(__name__)

OP_DOCS_URL = "https://developer.1password.com/docs/cli"
INSTALL_SUGGESTION = "Ensure that the 1Password CLI is installed and on your PATH"
SIGNIN_SUGGESTION = "Sign in to the 1Password CLI (run: op signin)"


@dataclass(frozen=True)
class FieldAssignment:
    """One field to set on a vault item."""
    label: str
    value: str
    field_type: str = "concealed"

    def to_cli(self) -> str:
        """Render as an ``op`` assignment statement: ``label[type]=value``."""
        label = self.label.replace("\\", "\\\\").replace(".", "\\.").replace("=", "\\=")
        return f"{label}[{self.field_type}]={self.value}"


class VaultClient(ABC):
    """Operations the sync needs from an external vault."""

    @abstractmethod
    def check_installed(self) -> str:
        """Return the tool version; raise ExternalToolError if unavailable."""

    @abstractmethod
    def get_vault(self, name: str) -> Dict[str, Any]:
        """Return vault metadata; raise VaultAccessError if unreachable."""

    @abstractmethod
    def get_item(self, title: str, vault: str) -> Optional[Dict[str, Any]]:
        """Return the item with this title, or None if there is none."""

    @abstractmethod
    def create_item(
        self,
        fields: List[FieldAssignment],
        vault: str,
        title: str,
        template: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Create an item and return it."""

    @abstractmethod
    def edit_item(self, item_id: str, fields: List[FieldAssignment]) -> Dict[str, Any]:
        """Set fields on an existing item and return it."""


class OnePasswordCLI(VaultClient):
    """VaultClient backed by the ``op`` command line tool."""

    def __init__(self, executable: str = "op"):
        self.executable = executable

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        command = [self.executable] + args
        logger.debug(f"Running: {' '.join(command[:3])} ...")
        try:
            return subprocess.run(command, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            raise ExternalToolError(
                "Unable to access 1Password CLI",
                suggestions=[INSTALL_SUGGESTION, f"Original error: {e}"],
                ref=OP_DOCS_URL,
            )

    def _run_json(self, args: List[str], failure: str) -> Dict[str, Any]:
        result = self._run(args + ["--format", "json"])
        if result.returncode != 0:
            raise ExternalToolError(
                f"{failure}: {result.stderr.strip() or 'unknown error'}",
                suggestions=[SIGNIN_SUGGESTION],
                ref=OP_DOCS_URL,
            )
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ExternalToolError(f"{failure}: unexpected output from op ({e})")

    def check_installed(self) -> str:
        result = self._run(["--version"])
        if result.returncode != 0:
            raise ExternalToolError(
                f"Unable to access 1Password CLI: {result.stderr.strip()}",
                suggestions=[INSTALL_SUGGESTION],
                ref=OP_DOCS_URL,
            )
        return result.stdout.strip()

    def get_vault(self, name: str) -> Dict[str, Any]:
        result = self._run(["vault", "get", name, "--format", "json"])
        if result.returncode != 0:
            raise VaultAccessError(
                f"Unable to access vault \"{name}\": {result.stderr.strip() or 'unknown error'}",
                suggestions=[
                    SIGNIN_SUGGESTION,
                    f"Check that the vault \"{name}\" exists and you have access to it",
                ],
            )
        return json.loads(result.stdout)

    def get_item(self, title: str, vault: str) -> Optional[Dict[str, Any]]:
        result = self._run(["item", "get", title, "--vault", vault, "--format", "json"])
        if result.returncode != 0:
            stderr = result.stderr.lower()
            if "isn't an item" in stderr or "not found" in stderr:
                logger.debug(f"No item titled '{title}' in vault '{vault}'")
                return None
            raise ExternalToolError(
                f"Failed to look up 1Password item \"{title}\": {result.stderr.strip()}",
                suggestions=[SIGNIN_SUGGESTION],
                ref=OP_DOCS_URL,
            )
        return json.loads(result.stdout)

    def create_item(
        self,
        fields: List[FieldAssignment],
        vault: str,
        title: str,
        template: Dict[str, Any],
    ) -> Dict[str, Any]:
        # op reads templates from a file path
        fd, template_path = tempfile.mkstemp(suffix=".json", prefix="op-bruno-")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(template, f)
            args = ["item", "create", "--vault", vault, "--title", title, "--template", template_path]
            args += [field.to_cli() for field in fields]
            return self._run_json(args, f"Failed to create 1Password item \"{title}\"")
        finally:
            os.unlink(template_path)

    def edit_item(self, item_id: str, fields: List[FieldAssignment]) -> Dict[str, Any]:
        args = ["item", "edit", item_id] + [field.to_cli() for field in fields]
        return self._run_json(args, f"Failed to update 1Password item {item_id}")
