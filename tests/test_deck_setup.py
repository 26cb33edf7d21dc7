"""
Tests for pushing an exported deck into Anki.
"""
import pytest

from app.modules.anki_export.anki_connect import AnkiConnectClient, AnkiConnectError
from app.modules.anki_export.deck_setup import (
    ensure_note_type,
    setup_deck,
    setup_from_export_dir,
)
from app.modules.anki_export.export import ExportOptions, build_note_type, write_export_package


def add_all(params):
    return [1000 + i for i in range(len(params["notes"]))]


@pytest.fixture
def note_type():
    return build_note_type(ExportOptions())


class TestEnsureNoteType:
    @pytest.mark.asyncio
    async def test_creates_missing_note_type(self, fake_anki, note_type):
        client = AnkiConnectClient("http://anki.test", transport=fake_anki.transport())

        assert await ensure_note_type(client, note_type) is True

        assert fake_anki.actions() == ["modelNames", "createModel"]
        params = fake_anki.params_for("createModel")[0]
        assert params["modelName"] == "FSRS-3V"
        assert params["inOrderFields"] == note_type.fields
        assert params["cardTemplates"][0]["Name"] == "Card 1"
        assert "{{Pergunta}}" in params["cardTemplates"][0]["Front"]

    @pytest.mark.asyncio
    async def test_updates_existing_note_type(self, fake_anki, note_type):
        fake_anki.responses["modelNames"] = ["Basic", "FSRS-3V"]
        client = AnkiConnectClient("http://anki.test", transport=fake_anki.transport())

        assert await ensure_note_type(client, note_type) is False

        assert fake_anki.actions() == ["modelNames", "updateModelStyling", "updateModelTemplates"]
        styling = fake_anki.params_for("updateModelStyling")[0]
        assert styling["model"]["css"] == note_type.css
        templates = fake_anki.params_for("updateModelTemplates")[0]["model"]["templates"]
        assert set(templates) == {"Card 1"}


class TestSetup:
    @pytest.mark.asyncio
    async def test_from_export_dir(self, tmp_path, fake_anki, final_cards):
        write_export_package(final_cards, tmp_path)
        fake_anki.responses["addNotes"] = add_all
        client = AnkiConnectClient("http://anki.test", transport=fake_anki.transport())

        result = await setup_from_export_dir(client, tmp_path)

        assert fake_anki.actions() == [
            "version",
            "modelNames",
            "createModel",
            "createDeck",
            "addNotes",
        ]
        assert fake_anki.params_for("createDeck") == [{"deck": "III-V::Terceiro-Ventriculo"}]
        notes = fake_anki.params_for("addNotes")[0]["notes"]
        assert len(notes) == 3
        assert notes[0]["tags"] == ["forame-monro", "clinico"]
        assert notes[0]["fields"]["Dificuldade"] == "D"

        assert result.anki_version == 6
        assert result.note_type_created is True
        assert result.import_summary.added == 3

    @pytest.mark.asyncio
    async def test_rerun_counts_duplicates(self, tmp_path, fake_anki, final_cards):
        write_export_package(final_cards, tmp_path)
        fake_anki.responses["modelNames"] = ["FSRS-3V"]
        fake_anki.responses["addNotes"] = lambda params: [None] * len(params["notes"])
        client = AnkiConnectClient("http://anki.test", transport=fake_anki.transport())

        result = await setup_from_export_dir(client, tmp_path)

        assert result.note_type_created is False
        assert result.import_summary.added == 0
        assert result.import_summary.duplicates == 3

    @pytest.mark.asyncio
    async def test_missing_export_dir(self, tmp_path, fake_anki):
        client = AnkiConnectClient("http://anki.test", transport=fake_anki.transport())
        with pytest.raises(FileNotFoundError):
            await setup_from_export_dir(client, tmp_path / "missing")
        assert fake_anki.calls == []

    @pytest.mark.asyncio
    async def test_stops_on_anki_error(self, fake_anki, note_type):
        def fail(params):
            raise AssertionError("createDeck should not be reached")

        fake_anki.responses["createDeck"] = fail
        client = AnkiConnectClient("http://anki.test", transport=fake_anki.transport())

        async def broken(*args, **kwargs):
            raise AnkiConnectError("model rejected")

        client.model_names = broken
        with pytest.raises(AnkiConnectError):
            await setup_deck(client, note_type, [], "Deck")
        assert fake_anki.actions() == ["version"]
