"""Merge the generated pre-request script into ``collection.bru``.

The managed code lives between two marker comments inside the
``script:pre-request`` section. Anything outside the markers belongs to the
user and is never touched or reordered.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from ..domains import collection_file
from ..domains.collection_file import PRE_REQUEST_SECTION, CollectionDocument
from ..domains.errors import MalformedFileError
from ..domains.reporter import LoggingReporter, Reporter

logger = logging.getLogger(__name__)

COLLECTION_FILE = "collection.bru"
START_MARKER = "// === START: 1Password Secret Management ==="
END_MARKER = "// === END: 1Password Secret Management ==="


class MergeState(Enum):
    CREATE = "create"
    ADD = "add"
    PREPEND = "prepend"
    REPLACE = "replace"


def build_block(script: str) -> List[str]:
    """Wrap script text in the markers, indented as a section body."""
    if START_MARKER in script or END_MARKER in script:
        raise ValueError("Generated script must not contain the managed block markers")
    return collection_file.indent_lines("\n".join([START_MARKER, script.rstrip("\n"), END_MARKER]))


def _marker_positions(lines: List[str], marker: str) -> List[int]:
    return [index for index, line in enumerate(lines) if line.strip() == marker]


def merge_block(existing: List[str], script: str) -> Tuple[List[str], MergeState]:
    """
    Merge the managed block into existing pre-request body lines.

    Returns:
        (new body lines, state applied)

    Raises:
        MalformedFileError: Markers missing their partner, duplicated, or in
            the wrong order
    """
    block = build_block(script)

    if not any(line.strip() for line in existing):
        return block, MergeState.ADD

    starts = _marker_positions(existing, START_MARKER)
    ends = _marker_positions(existing, END_MARKER)

    if not starts and not ends:
        return block + [""] + list(existing), MergeState.PREPEND

    if len(starts) != 1 or len(ends) != 1:
        raise MalformedFileError(
            f"Pre-request script has {len(starts)} start and {len(ends)} end markers, expected one of each",
            suggestions=[
                f"Remove the stray marker lines from the pre-request script in {COLLECTION_FILE}",
                f"Markers: '{START_MARKER}' / '{END_MARKER}'",
            ],
        )

    start, end = starts[0], ends[0]
    if end < start:
        raise MalformedFileError(
            "Pre-request script end marker appears before the start marker",
            suggestions=[f"Fix the managed block in {COLLECTION_FILE} so the start marker comes first"],
        )

    return existing[:start] + block + existing[end + 1:], MergeState.REPLACE


def merge_document(document: Optional[CollectionDocument], script: str) -> Tuple[CollectionDocument, MergeState]:
    """Apply the merge to a parsed document, or build a new one when ``document`` is None."""
    if document is None:
        document = CollectionDocument()
        document.add_section(PRE_REQUEST_SECTION, build_block(script))
        return document, MergeState.CREATE

    section = document.get(PRE_REQUEST_SECTION)
    if section is None:
        document.add_section(PRE_REQUEST_SECTION, build_block(script))
        return document, MergeState.ADD

    section.body, state = merge_block(section.body, script)
    return document, state


@dataclass
class MergePlan:
    """A merged collection file, rendered in memory and not yet written."""
    path: Path
    original: Optional[str]
    rendered: str
    state: MergeState

    @property
    def changed(self) -> bool:
        return self.rendered != self.original

    def write(self, reporter: Optional[Reporter] = None) -> MergeState:
        """Write the rendered file, skipping the write when nothing changed."""
        reporter = reporter or LoggingReporter(logger)

        if self.state is MergeState.PREPEND:
            reporter.warn(f"Pre-request script already exists. Please review the modifications at: {self.path}")

        if self.changed:
            self.path.write_text(self.rendered, encoding="utf-8")
        else:
            logger.debug(f"{self.path} already up to date")

        verb = "Created" if self.state is MergeState.CREATE else "Updated"
        reporter.info(f"{verb} {COLLECTION_FILE} with pre-request script ({self.state.value})")
        return self.state


def plan_merge(collection_dir, script: str) -> MergePlan:
    """
    Read ``<collection_dir>/collection.bru`` and merge the managed block in memory.

    Raises:
        MalformedFileError: If the existing file or its markers are malformed
    """
    path = Path(collection_dir) / COLLECTION_FILE

    if path.exists():
        original = path.read_text(encoding="utf-8")
        document = collection_file.parse(original, source=str(path))
    else:
        original = None
        document = None

    document, state = merge_document(document, script)
    return MergePlan(path=path, original=original, rendered=collection_file.serialize(document), state=state)


def merge_script(collection_dir, script: str, reporter: Optional[Reporter] = None) -> MergeState:
    """
    Upsert the managed pre-request block in ``<collection_dir>/collection.bru``.

    The whole file is rendered in memory before the single write, so a
    MalformedFileError leaves the file exactly as it was.
    """
    return plan_merge(collection_dir, script).write(reporter)
