"""Docblock lexer.

Turns a handler's documentation block into a title, a free-text
description and an ordered mapping of tag -> list of values:

    List users.

    Returns a paginated list.

    @group User management
    @queryParam page integer The page number. Example: 2
    @response {
      "data": []
    }

Lines that do not start with "@" continue the value of the previous tag.
"""

import re
from dataclasses import dataclass, field

TAG_LINE = re.compile(r"^@([A-Za-z][\w-]*)(?:\s+(.*))?$")


@dataclass
class DocBlock:
    title: str = ""
    description: str = ""
    tags: dict[str, list[str]] = field(default_factory=dict)

    def has(self, tag: str) -> bool:
        return tag in self.tags

    def first(self, tag: str) -> str | None:
        values = self.tags.get(tag)
        return values[0] if values else None

    def all(self, tag: str) -> list[str]:
        return self.tags.get(tag, [])


def parse(raw: str) -> dict[str, list[str]]:
    """Return only the tag -> values mapping of a docblock."""
    return parse_docblock(raw).tags


def parse_docblock(raw: str | None) -> DocBlock:
    if not raw:
        return DocBlock()

    text_lines: list[str] = []
    tags: dict[str, list[str]] = {}
    current: list[str] | None = None
    current_tag = None

    def flush():
        if current_tag is not None:
            tags.setdefault(current_tag, []).append("\n".join(current).strip())

    for line in raw.splitlines():
        stripped = line.strip()
        match = TAG_LINE.match(stripped)
        if match:
            flush()
            current_tag = match.group(1)
            current = [match.group(2) or ""]
        elif current_tag is not None:
            current.append(line.rstrip())
        else:
            text_lines.append(stripped)
    flush()

    title, description = _split_text(text_lines)
    return DocBlock(title=title, description=description, tags=tags)


def _split_text(lines: list[str]) -> tuple[str, str]:
    while lines and not lines[0]:
        lines = lines[1:]
    if not lines:
        return "", ""
    title = lines[0]
    description = "\n".join(lines[1:]).strip()
    return title, description
