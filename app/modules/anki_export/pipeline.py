"""Parse -> validate -> classify -> hint -> serialize over a whole deck CSV.

Malformed rows never abort a run: they are logged with their line number and
counted in ``PipelineResult.skipped``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import ValidationError

from app.core.logging import get_logger
from app.modules.anki_export.classifier import classify_difficulty
from app.modules.anki_export.csv_codec import parse_content, render_csv
from app.modules.anki_export.hints import generate_hint
from app.modules.anki_export.models.cards import (
    CardInput,
    ClassifiedCard,
    Difficulty,
    FinalCard,
    RawFields,
)
from app.modules.anki_export.models.fsrs import DifficultyCounts

logger = get_logger(__name__)

CLASSIFIED_HEADER = ["Pergunta", "Resposta", "Tags", "Mnemonico", "Dificuldade"]
HINTED_HEADER = [*CLASSIFIED_HEADER, "Hint"]

_DIFFICULTY_COLUMN = 4
_VALID_TOKENS = {d.value for d in Difficulty}


class RowRejected(ValueError):
    """A data row that cannot become a card."""


@dataclass
class PipelineConfig:
    has_header: bool = True
    # Trust a valid difficulty already present in the input instead of
    # re-running the classifier.
    keep_existing_difficulty: bool = False


@dataclass
class PipelineResult:
    cards: list[FinalCard] = field(default_factory=list)
    stats: DifficultyCounts = field(default_factory=DifficultyCounts)
    skipped: int = 0
    attempted: int = 0

    @property
    def accepted(self) -> int:
        return len(self.cards)

    @property
    def hinted(self) -> int:
        return sum(1 for c in self.cards if c.hint)

    def distribution(self) -> dict[str, float]:
        return {d.value: self.stats.percent(d) for d in Difficulty}

    def summary(self) -> dict:
        return {
            "attempted": self.attempted,
            "accepted": self.accepted,
            "skipped": self.skipped,
            "hinted": self.hinted,
            "by_difficulty": self.stats.model_dump(),
            "distribution": self.distribution(),
        }


def _issues(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


def build_card_input(raw: RawFields) -> CardInput:
    """Validate the content columns of a row; raises ``RowRejected``."""
    token = raw.get(_DIFFICULTY_COLUMN).strip()
    if token and token not in _VALID_TOKENS:
        raise RowRejected(f"unknown difficulty '{token}'")
    try:
        return CardInput(
            question=raw.get(0),
            answer=raw.get(1),
            tags=raw.get(2),
            mnemonic=raw.get(3),
        )
    except ValidationError as exc:
        raise RowRejected(_issues(exc)) from exc


def existing_difficulty(raw: RawFields) -> Difficulty | None:
    token = raw.get(_DIFFICULTY_COLUMN).strip()
    return Difficulty(token) if token in _VALID_TOKENS else None


def classify(card: CardInput, preset: Difficulty | None = None) -> ClassifiedCard:
    difficulty = preset if preset is not None else classify_difficulty(card)
    return ClassifiedCard(**card.model_dump(), difficulty=difficulty)


def finalize(card: ClassifiedCard) -> FinalCard:
    hint = generate_hint(card) if card.difficulty is Difficulty.DIFFICULT else ""
    return FinalCard(**card.model_dump(), hint=hint)


def process_row(raw: RawFields, config: PipelineConfig | None = None) -> FinalCard:
    config = config or PipelineConfig()
    card = build_card_input(raw)
    preset = existing_difficulty(raw) if config.keep_existing_difficulty else None
    return finalize(classify(card, preset))


def run_pipeline(content: str, config: PipelineConfig | None = None) -> PipelineResult:
    """Run every data line of ``content`` through the card stages."""
    config = config or PipelineConfig()
    parsed = parse_content(content, has_header=config.has_header)
    result = PipelineResult()

    for row in parsed.rows:
        result.attempted += 1
        raw = RawFields(line_no=row.line_no, values=row.fields)
        try:
            card = process_row(raw, config)
        except RowRejected as exc:
            result.skipped += 1
            preview = raw.get(0)[:50]
            logger.warning(
                "Line %d: invalid card skipped - %s (question: %r)",
                row.line_no,
                exc,
                preview,
                extra={"line_no": row.line_no},
            )
            continue
        result.cards.append(card)
        result.stats.add(card.difficulty)

    if result.skipped:
        logger.warning("Total invalid cards skipped: %d", result.skipped)
    logger.info(
        "Processed %d cards: E=%d M=%d D=%d (%d hinted)",
        result.accepted,
        result.stats.E,
        result.stats.M,
        result.stats.D,
        result.hinted,
    )
    return result


def card_row(card: FinalCard, include_hint: bool = True) -> list[str]:
    row = [card.question, card.answer, card.tags, card.mnemonic, card.difficulty.value]
    if include_hint:
        row.append(card.hint)
    return row


def render_cards_csv(cards: list[FinalCard], include_hint: bool = True) -> str:
    """Serialize cards as always-quoted CSV with the deck's Portuguese header."""
    header = HINTED_HEADER if include_hint else CLASSIFIED_HEADER
    return render_csv(header, (card_row(c, include_hint) for c in cards))


def classify_content(content: str, config: PipelineConfig | None = None) -> tuple[str, PipelineResult]:
    """Classification stage only: 5-column CSV with the difficulty column."""
    result = run_pipeline(content, config)
    return render_cards_csv(result.cards, include_hint=False), result


def hint_content(content: str, config: PipelineConfig | None = None) -> tuple[str, PipelineResult]:
    """Classification plus hints: 6-column CSV."""
    result = run_pipeline(content, config)
    return render_cards_csv(result.cards, include_hint=True), result
