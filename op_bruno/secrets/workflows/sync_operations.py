"""Workflow for syncing a Bruno collection's secrets with 1Password.

Steps run strictly in order and any error stops the run:

1. parse environment files and extract secrets
2. export the SecretMap into the collection directory
3. patch bruno.json
4. create/update the 1Password item (optional)
5. merge the pre-request script into collection.bru

collection.bru is parsed and merged in memory before step 2 and written
last.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..domains.bruno_config import BrunoConfig
from ..domains.environment_parser import extract_secrets, parse_environments
from ..domains.errors import MalformedFileError, NotFoundError
from ..domains.exporter import export_secrets
from ..domains.models import SecretMap, count_secrets
from ..domains.op_client import OnePasswordCLI, VaultClient
from ..domains.reporter import LoggingReporter, Reporter
from ..templates.pre_request import render_pre_request_script
from .script_merger import MergeState, plan_merge
from .vault_sync import SyncResult, VaultSync

logger = logging.getLogger(__name__)


@dataclass
class SyncOptions:
    collection_dir: Path
    vault: str
    title: Optional[str] = None
    output: str = "op-secrets.json"
    sync_vault: bool = False
    strict: bool = True
    verify_only: bool = False


@dataclass
class SyncSummary:
    """What a run did, for the final report."""
    title: str
    environments: List[str] = field(default_factory=list)
    secret_count: int = 0
    output_path: Optional[Path] = None
    config_updated: bool = False
    vault_result: Optional[SyncResult] = None
    vault_accessible: Optional[bool] = None
    merge_state: Optional[MergeState] = None

    @property
    def completed(self) -> bool:
        return self.merge_state is not None


def _check_reference_part(kind: str, value: str, origin: str) -> None:
    """Vault and item names are joined with '/' into references, so they must not contain one."""
    if not value or not value.strip() or "/" in value:
        raise MalformedFileError(
            f"{kind} '{value}' ({origin}) cannot be used in a vault reference: it is empty or contains '/'",
            suggestions=[f"Pass --{kind.lower()} with a name that has no '/'"],
        )


def run_sync(
    options: SyncOptions,
    reporter: Optional[Reporter] = None,
    vault_client: Optional[VaultClient] = None,
) -> SyncSummary:
    """
    Run the full sync for one collection.

    Every input file, collection.bru included, is read and checked before
    the first write, so a malformed file stops the run with nothing changed.

    Args:
        options: What to sync and where
        reporter: Receives progress messages
        vault_client: Vault implementation; the 1Password CLI when omitted

    Returns:
        SyncSummary. ``completed`` is False when the run stopped early
        because there was nothing to sync, or in verify-only mode.

    Raises:
        OpBrunoError: Any fatal problem; nothing after the failing step runs
    """
    reporter = reporter or LoggingReporter(logger)
    collection_dir = Path(options.collection_dir).resolve()

    if not collection_dir.is_dir():
        raise NotFoundError(
            f"Bruno directory not found: {collection_dir}",
            suggestions=["Pass the path of the folder that contains bruno.json"],
        )

    config = BrunoConfig(collection_dir, reporter)
    title = options.title or config.get_name()
    _check_reference_part("Vault", options.vault, "vault option")
    _check_reference_part("Title", title, "--title" if options.title else "bruno.json name")
    summary = SyncSummary(title=title)

    reporter.info("Step 1: Extracting secrets from Bruno environments...")
    environments = parse_environments(collection_dir, strict=options.strict, reporter=reporter)
    secret_map: SecretMap = extract_secrets(environments, options.vault, title)
    summary.environments = list(secret_map)
    summary.secret_count = count_secrets(secret_map)

    if not environments:
        reporter.warn("No environments found in Bruno collection")
    elif summary.secret_count == 0:
        reporter.warn("None of the environments found has secret")
    else:
        reporter.info(f"  Found {summary.secret_count} secret(s) across {len(secret_map)} environment(s)")

    vault_sync = None
    if options.sync_vault or options.verify_only:
        vault_sync = VaultSync(vault_client or OnePasswordCLI(), reporter)

    if options.verify_only:
        summary.vault_accessible = vault_sync.verify_access(options.vault, warn_only=True)
        reporter.info("Verify only: no files were written")
        return summary

    if summary.secret_count == 0:
        return summary

    merge_plan = plan_merge(collection_dir, render_pre_request_script(secret_map))

    reporter.info("Step 2: Exporting secrets...")
    summary.output_path = collection_dir / options.output
    export_secrets(secret_map, summary.output_path)
    reporter.info(f"  Exported secrets to {summary.output_path}")

    reporter.info("Step 3: Updating bruno.json...")
    summary.config_updated = config.update()

    if vault_sync is not None:
        reporter.info("Step 4: Creating/updating 1Password item...")
        vault_sync.verify_access(options.vault)
        summary.vault_accessible = True
        summary.vault_result = vault_sync.upsert_item(secret_map, options.vault, title)
    else:
        reporter.info("Step 4: Skipping 1Password item creation (use --1password flag to enable)")

    reporter.info("Step 5: Updating collection.bru with pre-request script...")
    summary.merge_state = merge_plan.write(reporter)

    return summary
