"""Write the Anki export package for a processed deck.

The package directory holds everything needed to set the deck up in Anki:

- ``terceiro-ventriculo-fsrs.txt``: cards in Anki's text import format
- ``note-type-templates.json``: note type fields, card templates and CSS
- ``deck-config.json``: deck summary and recommended FSRS preset
- ``fsrs-presets.json``: all FSRS presets
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Sequence

from app.core.logging import get_logger
from app.modules.anki_export.anki_format import render_import_file
from app.modules.anki_export.models.cards import FinalCard
from app.modules.anki_export.models.fsrs import (
    DEFAULT_PRESETS,
    CardTemplate,
    DeckConfig,
    NoteType,
    build_deck_config,
)

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

IMPORT_FILE = "terceiro-ventriculo-fsrs.txt"
NOTE_TYPE_FILE = "note-type-templates.json"
DECK_CONFIG_FILE = "deck-config.json"
PRESETS_FILE = "fsrs-presets.json"


@dataclass
class ExportOptions:
    deck_name: str = "III-V::Terceiro-Ventriculo"
    note_type: str = "FSRS-3V"
    tag_prefix: str = "3V"
    templates_dir: Path = TEMPLATES_DIR

    @classmethod
    def from_settings(cls, deck_settings) -> "ExportOptions":
        return cls(
            deck_name=deck_settings.deck_name,
            note_type=deck_settings.note_type,
            tag_prefix=deck_settings.tag_prefix,
        )


@dataclass
class ExportPackage:
    output_dir: Path
    import_file: Path
    note_type_file: Path
    deck_config_file: Path
    presets_file: Path
    deck_config: DeckConfig
    files: list[Path] = field(default_factory=list)


def load_template(name: str, templates_dir: Path = TEMPLATES_DIR) -> str:
    path = templates_dir / name
    if not path.exists():
        raise FileNotFoundError(f"Template not found: {path}")
    return path.read_text(encoding="utf-8")


def build_note_type(options: ExportOptions) -> NoteType:
    return NoteType(
        name=options.note_type,
        templates=[
            CardTemplate(
                name="Card 1",
                qfmt=load_template("card-front.html", options.templates_dir),
                afmt=load_template("card-back.html", options.templates_dir),
            )
        ],
        css=load_template("styles.css", options.templates_dir),
    )


def load_note_type(path: Path) -> NoteType:
    """Read a ``note-type-templates.json`` written by ``write_export_package``."""
    if not path.exists():
        raise FileNotFoundError(f"Note type file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    return NoteType.model_validate(data)


def _write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def write_export_package(
    cards: Sequence[FinalCard],
    output_dir: Path | str,
    options: ExportOptions | None = None,
    *,
    now: datetime | None = None,
) -> ExportPackage:
    options = options or ExportOptions()
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    # Templates first so a missing file fails before anything is written
    note_type = build_note_type(options)

    import_path = out / IMPORT_FILE
    import_path.write_text(
        render_import_file(
            cards,
            deck_name=options.deck_name,
            note_type=options.note_type,
            tag_prefix=options.tag_prefix,
        ),
        encoding="utf-8",
    )
    logger.info("Import file: %s", import_path)

    note_type_path = _write_json(out / NOTE_TYPE_FILE, note_type.model_dump())
    logger.info("Note type templates: %s", note_type_path)

    config = build_deck_config(
        cards, deck_name=options.deck_name, note_type_name=options.note_type, now=now
    )
    config_path = _write_json(out / DECK_CONFIG_FILE, config.model_dump(by_alias=True))
    logger.info("Deck config: %s", config_path)

    presets_path = _write_json(
        out / PRESETS_FILE,
        {name: p.model_dump(by_alias=True) for name, p in DEFAULT_PRESETS.items()},
    )
    logger.info("FSRS presets: %s", presets_path)

    return ExportPackage(
        output_dir=out,
        import_file=import_path,
        note_type_file=note_type_path,
        deck_config_file=config_path,
        presets_file=presets_path,
        deck_config=config,
        files=[import_path, note_type_path, config_path, presets_path],
    )
