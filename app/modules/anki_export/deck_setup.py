"""Push an exported deck into a running Anki through AnkiConnect.

Steps: check the connection, create or update the note type, create the deck,
then import the notes in batches. FSRS itself has to be enabled in Anki's deck
options; AnkiConnect does not expose those settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from app.core.logging import get_logger
from app.modules.anki_export.anki_connect import AnkiConnectClient, ImportSummary
from app.modules.anki_export.anki_format import AnkiNote, parse_import_file
from app.modules.anki_export.export import (
    IMPORT_FILE,
    NOTE_TYPE_FILE,
    ExportOptions,
    load_note_type,
)
from app.modules.anki_export.models.fsrs import NoteType

logger = get_logger(__name__)

FSRS_MANUAL_STEPS = (
    "Anki -> Deck Options (gear icon)",
    "FSRS -> Enable FSRS",
    "Desired Retention: 0.90",
    "Learning Steps: 10m 30m",
)


@dataclass
class SetupResult:
    anki_version: int
    note_type_created: bool
    import_summary: ImportSummary


async def ensure_note_type(client: AnkiConnectClient, note_type: NoteType) -> bool:
    """Create the note type, or refresh its styling/templates if it exists.

    Returns True when the note type was created.
    """
    first = note_type.templates[0] if note_type.templates else None
    existing = await client.model_names()

    if note_type.name in existing:
        logger.info("Note type %s already exists, updating", note_type.name)
        await client.invoke(
            "updateModelStyling", {"model": {"name": note_type.name, "css": note_type.css}}
        )
        if first is not None:
            await client.invoke(
                "updateModelTemplates",
                {
                    "model": {
                        "name": note_type.name,
                        "templates": {first.name: {"Front": first.qfmt, "Back": first.afmt}},
                    }
                },
            )
        return False

    await client.invoke(
        "createModel",
        {
            "modelName": note_type.name,
            "inOrderFields": note_type.fields,
            "css": note_type.css,
            "cardTemplates": (
                [{"Name": first.name, "Front": first.qfmt, "Back": first.afmt}]
                if first is not None
                else []
            ),
        },
    )
    logger.info("Note type %s created", note_type.name)
    return True


def load_import_notes(path: Path, options: ExportOptions) -> list[AnkiNote]:
    if not path.exists():
        raise FileNotFoundError(f"Import file not found: {path}")
    return parse_import_file(
        path.read_text(encoding="utf-8"),
        deck_name=options.deck_name,
        note_type=options.note_type,
        tag_prefix=options.tag_prefix,
    )


async def import_notes(
    client: AnkiConnectClient,
    notes: Sequence[AnkiNote],
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> ImportSummary:
    logger.info("Importing %d notes in batches of %d", len(notes), client.batch_size)
    summary = await client.add_notes(notes, on_progress=on_progress)
    logger.info(
        "%d notes added (%d duplicates ignored) of %d attempted",
        summary.added,
        summary.duplicates,
        summary.attempted,
    )
    return summary


async def setup_deck(
    client: AnkiConnectClient,
    note_type: NoteType,
    notes: Sequence[AnkiNote],
    deck_name: str,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> SetupResult:
    version = await client.version()
    logger.info("Connected to AnkiConnect (version %s)", version)

    created = await ensure_note_type(client, note_type)
    await client.create_deck(deck_name)
    logger.info("Deck %s ready", deck_name)

    summary = await import_notes(client, notes, on_progress=on_progress)

    logger.info("FSRS must be enabled manually: %s", "; ".join(FSRS_MANUAL_STEPS))
    return SetupResult(anki_version=version, note_type_created=created, import_summary=summary)


async def setup_from_export_dir(
    client: AnkiConnectClient,
    export_dir: Path | str,
    options: ExportOptions | None = None,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> SetupResult:
    """Run the full setup from a directory written by ``write_export_package``."""
    options = options or ExportOptions()
    base = Path(export_dir)
    note_type = load_note_type(base / NOTE_TYPE_FILE)
    notes = load_import_notes(base / IMPORT_FILE, options)
    return await setup_deck(
        client, note_type, notes, options.deck_name, on_progress=on_progress
    )
