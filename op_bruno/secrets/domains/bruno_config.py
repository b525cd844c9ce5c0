"""Read-merge-write access to a collection's ``bruno.json``."""
import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import MalformedFileError, NotFoundError
from .reporter import LoggingReporter, Reporter

logger = logging.getLogger(__name__)

CONFIG_FILE = "bruno.json"
# Modules the generated pre-request script requires
REQUIRED_MODULES = ["child_process"]


def patch(document: Dict[str, Any]) -> bool:
    """
    Enable filesystem access and whitelist the required script modules.

    Mutates ``document`` in place. Existing whitelist entries keep their
    order; missing required entries are appended. Every other key, at the
    top level or under ``scripts``, is left as is.

    Returns:
        True if anything changed
    """
    before = copy.deepcopy(document)

    scripts = document.get("scripts")
    if not isinstance(scripts, dict):
        scripts = {}
        document["scripts"] = scripts

    access = scripts.get("filesystemAccess")
    if not isinstance(access, dict):
        access = {}
        scripts["filesystemAccess"] = access
    access["allow"] = True

    whitelist = scripts.get("moduleWhitelist")
    if not isinstance(whitelist, list):
        whitelist = []
        scripts["moduleWhitelist"] = whitelist
    for module in REQUIRED_MODULES:
        if module not in whitelist:
            whitelist.append(module)

    return document != before


class BrunoConfig:
    """The ``bruno.json`` sidecar of one collection."""

    def __init__(self, collection_dir, reporter: Optional[Reporter] = None):
        self.collection_dir = Path(collection_dir)
        self.path = self.collection_dir / CONFIG_FILE
        self.reporter = reporter or LoggingReporter(logger)

    def load(self) -> Dict[str, Any]:
        """
        Load the config document.

        Raises:
            NotFoundError: If bruno.json does not exist
            MalformedFileError: If it is not a JSON object
        """
        if not self.path.exists():
            raise NotFoundError(
                f"No {CONFIG_FILE} found at {self.path}",
                suggestions=["Point the command at the root folder of a Bruno collection"],
            )

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise MalformedFileError(f"Failed to parse {self.path}: {e}")

        if not isinstance(document, dict):
            raise MalformedFileError(f"{self.path} must contain a JSON object")

        return document

    def get_name(self) -> str:
        """Collection name, falling back to the directory name."""
        name = self.load().get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
        return self.collection_dir.resolve().name

    def update(self) -> bool:
        """Patch bruno.json on disk. Returns True if the file was rewritten."""
        document = self.load()

        if not patch(document):
            self.reporter.info(f"{CONFIG_FILE} already allows filesystem access and required modules")
            return False

        self.path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        self.reporter.info(f"Whitelisted modules and enabled filesystem access in {CONFIG_FILE}")
        return True
