"""
Tests for the batch pipeline: skip accounting, ordering and stage outputs.
"""
import logging

import pytest

from app.modules.anki_export.csv_codec import parse_content
from app.modules.anki_export.models.cards import Difficulty, RawFields
from app.modules.anki_export.pipeline import (
    CLASSIFIED_HEADER,
    HINTED_HEADER,
    PipelineConfig,
    RowRejected,
    build_card_input,
    classify_content,
    hint_content,
    process_row,
    run_pipeline,
)

NO_HEADER = PipelineConfig(has_header=False)


class TestRunPipeline:
    def test_sample_deck(self, sample_csv):
        result = run_pipeline(sample_csv)

        assert result.attempted == 5
        assert result.accepted == 4
        assert result.skipped == 1
        assert result.stats.model_dump() == {"E": 1, "M": 2, "D": 1}
        assert [c.question for c in result.cards] == [
            "CASO: Paciente com lesão",
            "V.C.I. = ___",
            "Qual o teto do 3V?",
            "Em que % dos casos?",
        ]

    def test_clinical_case_scenario(self):
        line = "CASO: Paciente com lesão,Compressão do forame de Monro,forame-monro,,,"
        result = run_pipeline(line, NO_HEADER)

        card = result.cards[0]
        assert card.difficulty is Difficulty.DIFFICULT
        assert card.hint == "Pense nas estruturas adjacentes ao forame de Monro"

    def test_abbreviation_scenario(self):
        result = run_pipeline("V.C.I. = ___,Veia Cava Inferior,abreviacoes,,,", NO_HEADER)

        card = result.cards[0]
        assert card.difficulty is Difficulty.EASY
        assert card.hint == ""

    def test_hints_only_on_difficult_cards(self, sample_csv):
        result = run_pipeline(sample_csv)
        for card in result.cards:
            if card.difficulty is Difficulty.DIFFICULT:
                assert card.hint
            else:
                assert card.hint == ""
        assert result.hinted == 1

    @pytest.mark.parametrize("bad_count", [0, 1, 3])
    def test_skip_accounting(self, bad_count):
        good = [f"Pergunta {i}?,Resposta {i},anatomia,," for i in range(4)]
        bad = [f"Pergunta sem resposta {i}" for i in range(bad_count)]
        lines = []
        for i, g in enumerate(good):
            lines.append(g)
            if i < len(bad):
                lines.append(bad[i])

        result = run_pipeline("\n".join(lines), NO_HEADER)

        assert result.attempted == len(good) + bad_count
        assert result.accepted == len(good)
        assert result.skipped == bad_count

    def test_empty_question_row_is_skipped(self):
        result = run_pipeline(",resposta,tags", NO_HEADER)
        assert result.skipped == 1
        assert result.cards == []

    def test_whitespace_only_question_row_is_skipped(self):
        result = run_pipeline("   ,resposta,tags\nq,a,anatomia", NO_HEADER)
        assert result.skipped == 1
        assert [c.question for c in result.cards] == ["q"]

    def test_unknown_difficulty_token_is_skipped(self):
        result = run_pipeline("q,a,anatomia,,X,", NO_HEADER)
        assert result.skipped == 1

    def test_skipped_rows_are_logged_with_line_number(self, sample_csv, caplog):
        with caplog.at_level(logging.WARNING):
            run_pipeline(sample_csv)
        assert any("Line 5" in r.getMessage() for r in caplog.records)

    def test_skip_log_uses_physical_line_number(self, caplog):
        content = "\n\nPergunta,Resposta\n\nsem resposta\nq,a,anatomia"
        with caplog.at_level(logging.WARNING):
            result = run_pipeline(content)

        assert result.skipped == 1
        skipped = [r for r in caplog.records if getattr(r, "line_no", None) == 5]
        assert skipped and "Line 5" in skipped[0].getMessage()

    def test_empty_content(self):
        result = run_pipeline("")
        assert result.attempted == 0
        assert result.cards == []

    def test_summary(self, sample_csv):
        summary = run_pipeline(sample_csv).summary()
        assert summary["attempted"] == 5
        assert summary["accepted"] == 4
        assert summary["skipped"] == 1
        assert summary["distribution"] == {"E": 25.0, "M": 50.0, "D": 25.0}


class TestExistingDifficulty:
    LINE = "O que e X?,Resposta,clinico,,E,"

    def test_reclassified_by_default(self):
        result = run_pipeline(self.LINE, NO_HEADER)
        assert result.cards[0].difficulty is Difficulty.DIFFICULT

    def test_kept_when_requested(self):
        config = PipelineConfig(has_header=False, keep_existing_difficulty=True)
        card = run_pipeline(self.LINE, config).cards[0]
        assert card.difficulty is Difficulty.EASY
        assert card.hint == ""

    def test_missing_token_falls_back_to_classifier(self):
        config = PipelineConfig(has_header=False, keep_existing_difficulty=True)
        card = run_pipeline("O que e X?,Resposta,clinico,,,", config).cards[0]
        assert card.difficulty is Difficulty.DIFFICULT


class TestRowStages:
    def test_build_card_input_rejects_missing_answer(self):
        with pytest.raises(RowRejected):
            build_card_input(RawFields(line_no=2, values=["only question"]))

    def test_process_row(self):
        card = process_row(RawFields(line_no=2, values=["CASO: x", "y", "anatomia"]))
        assert card.difficulty is Difficulty.DIFFICULT
        assert card.hint == "Analise a localização anatômica e estruturas adjacentes"


class TestStageOutputs:
    def test_classify_content(self, sample_csv):
        text, result = classify_content(sample_csv)
        parsed = parse_content(text)

        assert parsed.header == CLASSIFIED_HEADER
        assert len(parsed.rows) == result.accepted
        assert [r.fields[4] for r in parsed.rows] == ["D", "E", "M", "M"]
        assert text.splitlines()[0] == '"Pergunta","Resposta","Tags","Mnemonico","Dificuldade"'

    def test_hint_content_round_trips(self, sample_csv):
        text, result = hint_content(sample_csv)
        parsed = parse_content(text)

        assert parsed.header == HINTED_HEADER
        assert parsed.rows[0].fields[5] == result.cards[0].hint
        assert parsed.rows[2].fields[1] == "Fórnice, tela coroide"

    def test_hinted_output_feeds_back_into_pipeline(self, sample_csv):
        text, first = hint_content(sample_csv)
        config = PipelineConfig(keep_existing_difficulty=True)
        second = run_pipeline(text, config)

        assert second.skipped == 0
        assert second.cards == first.cards
