"""Quoted-field CSV tokenizer and serializer for the flashcard exports.

The deck CSVs are written by hand and by spreadsheets, so parsing is lenient:
each physical line is one record, a doubled quote inside a quoted span is a
literal quote, and an unterminated quoted span simply runs to the end of the
line instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

DELIMITER = ","
QUOTE = '"'

_NEEDS_QUOTING = (DELIMITER, QUOTE, "\n", "\r")


@dataclass
class CSVRow:
    """One parsed data line and its 1-based position in the source text."""

    line_no: int
    fields: list[str]


@dataclass
class ParsedCSV:
    header: list[str] = field(default_factory=list)
    rows: list[CSVRow] = field(default_factory=list)

    @property
    def values(self) -> list[list[str]]:
        return [r.fields for r in self.rows]


def parse_line(line: str) -> list[str]:
    """Split a single CSV line into its field values.

    An empty line yields ``[""]``.
    """
    result: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        char = line[i]
        if char == QUOTE:
            if in_quotes and i + 1 < n and line[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            result.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    result.append("".join(current))
    return result


def escape_field(value: str) -> str:
    """Quote a field only when it carries a delimiter, quote or line break."""
    if any(ch in value for ch in _NEEDS_QUOTING):
        return escape_field_quoted(value)
    return value


def escape_field_quoted(value: str) -> str:
    return QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE


def to_line(fields: Iterable[str], always_quote: bool = False) -> str:
    escape = escape_field_quoted if always_quote else escape_field
    return DELIMITER.join(escape(f) for f in fields)


def _split_lines(content: str) -> list[str]:
    return [ln[:-1] if ln.endswith("\r") else ln for ln in content.split("\n")]


def parse_content(content: str, has_header: bool = True) -> ParsedCSV:
    """Parse a whole CSV document.

    Blank and whitespace-only lines are skipped; with ``has_header`` the first
    non-blank line is the header. Line numbers are 1-based physical line
    numbers of the source text, blank lines included.
    """
    parsed = ParsedCSV()
    header_pending = has_header

    for line_no, line in enumerate(_split_lines(content), start=1):
        if not line.strip():
            continue
        if header_pending:
            parsed.header = parse_line(line)
            header_pending = False
            continue
        parsed.rows.append(CSVRow(line_no=line_no, fields=parse_line(line)))

    return parsed


def render_csv(header: list[str], rows: Iterable[list[str]], always_quote: bool = True) -> str:
    """Render a header and rows back to CSV text joined with ``\\n``."""
    lines = [to_line(header, always_quote=always_quote)]
    lines.extend(to_line(r, always_quote=always_quote) for r in rows)
    return "\n".join(lines)
