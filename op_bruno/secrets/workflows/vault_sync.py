"""Create or update the 1Password item that holds a collection's secrets."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..domains.errors import OpBrunoError
from ..domains.models import SecretMap
from ..domains.op_client import FieldAssignment, VaultClient
from ..domains.reporter import LoggingReporter, Reporter

logger = logging.getLogger(__name__)

PLACEHOLDER_VALUE = "to-be-replaced-with-real-secret"
ITEM_CATEGORY = "API_CREDENTIAL"


def item_template(title: str) -> Dict[str, Any]:
    """Template for a new item: API credential with an empty notes field."""
    return {
        "title": title,
        "category": ITEM_CATEGORY,
        "fields": [
            {
                "id": "notesPlain",
                "label": "notesPlain",
                "purpose": "NOTES",
                "type": "STRING",
                "value": "",
            },
        ],
    }


def field_label(environment: str, variable: str) -> str:
    return f"{environment}/{variable}"


@dataclass
class SyncResult:
    """Outcome of an item upsert."""
    item_id: Optional[str]
    created: bool
    added_fields: List[str] = field(default_factory=list)


class VaultSync:
    """Keeps exactly one vault item per title in step with a SecretMap."""

    def __init__(self, client: VaultClient, reporter: Optional[Reporter] = None):
        self.client = client
        self.reporter = reporter or LoggingReporter(logger)

    def build_fields(self, secret_map: SecretMap) -> List[FieldAssignment]:
        """One concealed placeholder field per ``<environment>/<variable>``."""
        return [
            FieldAssignment(label=field_label(env, variable.name), value=PLACEHOLDER_VALUE)
            for env, variables in secret_map.items()
            for variable in variables
        ]

    def verify_access(self, vault: str, warn_only: bool = False) -> bool:
        """
        Check that the CLI works and the vault is reachable.

        Args:
            vault: Vault name
            warn_only: Report failures as warnings and return False instead
                of raising

        Returns:
            True if the vault is accessible
        """
        try:
            version = self.client.check_installed()
            logger.debug(f"1Password CLI version {version}")
            self.client.get_vault(vault)
        except OpBrunoError as e:
            if not warn_only:
                raise
            self.reporter.warn(e.message)
            for suggestion in e.suggestions:
                self.reporter.warn(f"  {suggestion}")
            return False
        return True

    def upsert_item(self, secret_map: SecretMap, vault: str, title: str) -> SyncResult:
        """
        Create the item, or add the fields it is missing.

        Existing fields are never overwritten or removed, so values filled
        in through 1Password survive later runs.
        """
        fields = self.build_fields(secret_map)
        item = self.client.get_item(title, vault)

        if item is None:
            self.reporter.info(f"Creating 1Password item \"{title}\" in vault \"{vault}\"")
            created = self.client.create_item(fields, vault=vault, title=title, template=item_template(title))
            self.reporter.info(f"Created 1Password item \"{title}\" with {len(fields)} field(s)")
            return SyncResult(item_id=created.get("id"), created=True, added_fields=[f.label for f in fields])

        existing_labels = {f.get("label") for f in item.get("fields") or []}
        missing = [f for f in fields if f.label not in existing_labels]

        if not missing:
            self.reporter.info(f"1Password item \"{title}\" already has every secret field")
            return SyncResult(item_id=item.get("id"), created=False)

        self.reporter.info(f"Updating 1Password item \"{title}\" in vault \"{vault}\"")
        edited = self.client.edit_item(item["id"], missing)
        self.reporter.info(f"Added {len(missing)} field(s) to 1Password item \"{title}\"")
        return SyncResult(item_id=edited.get("id", item["id"]), created=False, added_fields=[f.label for f in missing])
