"""Structured view of a Bruno ``collection.bru`` document.

A collection file is a sequence of top-level sections:

    meta {
      name: My API
    }

    script:pre-request {
      const token = bru.getEnvVar("token");
      if (!token) {
        console.warn("no token");
      }
    }

A section header sits in column 0 and ends with ``{`` (or ``[`` for list
sections). The section is closed by a line whose only content is the
matching ``}`` / ``]`` in column 0, so braces of indented script code are
plain body text. Body lines are kept raw, which makes ``serialize(parse(x))
== x`` for every well-formed input.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import MalformedFileError

PRE_REQUEST_SECTION = "script:pre-request"
BODY_INDENT = "  "

_HEADER_RE = re.compile(r"^([A-Za-z0-9_][A-Za-z0-9_:.\-]*)\s*([{\[])\s*$")
_CLOSERS = {"{": "}", "[": "]"}


@dataclass
class Section:
    """One top-level block of the collection file."""
    name: str
    body: List[str] = field(default_factory=list)
    opener: str = "{"
    # blank lines between the previous section (or start of file) and the header
    leading: List[str] = field(default_factory=list)
    # header and closing lines as read from disk, reused verbatim when serializing
    raw_header: Optional[str] = None
    raw_closer: Optional[str] = None

    @property
    def header(self) -> str:
        return self.raw_header or f"{self.name} {self.opener}"

    @property
    def closer(self) -> str:
        return _CLOSERS[self.opener]


@dataclass
class CollectionDocument:
    """Ordered sections plus whatever blank lines follow the last one."""
    sections: Dict[str, Section] = field(default_factory=dict)
    trailing: List[str] = field(default_factory=lambda: [""])

    def get(self, name: str) -> Optional[Section]:
        return self.sections.get(name)

    def add_section(self, name: str, body: List[str]) -> Section:
        """Append a new section, separated from the previous one by a blank line."""
        if name in self.sections:
            raise ValueError(f"Section '{name}' already exists")
        leading = [""] if self.sections else []
        section = Section(name=name, body=list(body), leading=leading)
        self.sections[name] = section
        return section


def parse(content: str, source: str = "collection.bru") -> CollectionDocument:
    """
    Parse collection text into a CollectionDocument.

    Raises:
        MalformedFileError: For text outside a section, duplicate sections or
            a section still open at end of file
    """
    document = CollectionDocument(trailing=[])
    pending_blank: List[str] = []
    current: Optional[Section] = None

    for lineno, line in enumerate(content.split("\n"), start=1):
        if current is not None:
            if line.rstrip() == current.closer:
                current.raw_closer = line
                document.sections[current.name] = current
                current = None
            else:
                current.body.append(line)
            continue

        if not line.strip():
            pending_blank.append(line)
            continue

        match = _HEADER_RE.match(line)
        if not match:
            raise MalformedFileError(
                f"{source} line {lineno}: unexpected content outside of a section: {line.strip()!r}",
                suggestions=[f"Review {source} and make sure every block is opened and closed"],
            )

        name, opener = match.group(1), match.group(2)
        if name in document.sections:
            raise MalformedFileError(f"{source} line {lineno}: duplicate section '{name}'")

        current = Section(name=name, opener=opener, leading=pending_blank, raw_header=line)
        pending_blank = []

    if current is not None:
        raise MalformedFileError(
            f"{source}: section '{current.name}' is not closed before end of file",
            suggestions=[f"Add a closing '{current.closer}' in column 0 to {source}"],
        )

    document.trailing = pending_blank
    return document


def serialize(document: CollectionDocument) -> str:
    """Render a CollectionDocument back into ``.bru`` text."""
    lines: List[str] = []
    for section in document.sections.values():
        lines.extend(section.leading)
        lines.append(section.header)
        lines.extend(section.body)
        lines.append(section.raw_closer or section.closer)
    lines.extend(document.trailing)
    return "\n".join(lines)


def indent_lines(text: str) -> List[str]:
    """Split script text into body lines with Bruno's two-space indent."""
    return [BODY_INDENT + line if line.strip() else "" for line in text.splitlines()]
