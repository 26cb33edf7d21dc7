"""Anki text import format (tab separated, with ``#`` header directives)."""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, Field

from app.modules.anki_export.models.cards import FinalCard
from app.modules.anki_export.models.fsrs import NOTE_FIELDS

DIRECTIVE_MARKER = "#"
TAG_SEPARATOR = "::"


class AnkiNote(BaseModel):
    """Payload shape of one note for AnkiConnect's ``addNotes``."""

    deckName: str
    modelName: str
    fields: dict[str, str]
    tags: list[str] = Field(default_factory=list)


def tag_tokens(tags: str) -> list[str]:
    """Comma-separated tag text -> tokens; whitespace inside a tag splits it.

    Anki separates tags with spaces, and a tab or line break would open a new
    column or record in the import file.
    """
    return [t for part in tags.split(",") for t in part.split()]


def escape_for_anki(text: str) -> str:
    return (
        text.replace("\t", "    ")
        .replace("\r\n", "<br>")
        .replace("\r", "<br>")
        .replace("\n", "<br>")
        .replace('"', "&quot;")
    )


def anki_tags(tags: str, prefix: str) -> str:
    """``a, b`` -> ``<prefix>::a <prefix>::b``."""
    return " ".join(f"{prefix}{TAG_SEPARATOR}{t}" for t in tag_tokens(tags))


def header_lines(deck_name: str, note_type: str) -> list[str]:
    return [
        "#separator:Tab",
        "#html:true",
        f"#deck:{deck_name}",
        f"#notetype:{note_type}",
        "#tags column:3",
        "",
    ]


def card_to_line(card: FinalCard, tag_prefix: str) -> str:
    fields = [
        escape_for_anki(card.question),
        escape_for_anki(card.answer),
        anki_tags(card.tags, tag_prefix),
        escape_for_anki(card.mnemonic),
        card.difficulty.value,
        escape_for_anki(card.hint),
    ]
    return "\t".join(fields)


def render_import_file(
    cards: Iterable[FinalCard], *, deck_name: str, note_type: str, tag_prefix: str
) -> str:
    lines = header_lines(deck_name, note_type)
    lines.extend(card_to_line(c, tag_prefix) for c in cards)
    return "\n".join(lines)


def _strip_prefix(tag: str, prefix: str) -> str:
    marker = f"{prefix}{TAG_SEPARATOR}"
    return tag[len(marker):] if tag.startswith(marker) else tag


def parse_import_file(
    content: str, *, deck_name: str, note_type: str, tag_prefix: str
) -> list[AnkiNote]:
    """Read an import file back into AnkiConnect notes.

    Directive and blank lines are skipped, as are lines with fewer than six
    columns.
    """
    notes: list[AnkiNote] = []
    for line in content.split("\n"):
        if line.startswith(DIRECTIVE_MARKER) or not line.strip():
            continue
        columns = line.split("\t")
        if len(columns) < len(NOTE_FIELDS):
            continue
        values = columns[: len(NOTE_FIELDS)]
        values[4] = values[4] or "M"
        tag_text = values[2]
        notes.append(
            AnkiNote(
                deckName=deck_name,
                modelName=note_type,
                fields=dict(zip(NOTE_FIELDS, values)),
                tags=[_strip_prefix(t, tag_prefix) for t in tag_text.split(" ") if t.strip()],
            )
        )
    return notes
