"""FSRS preset, deck configuration and note type models.

These only describe the values handed to Anki; scheduling itself is done by
Anki's FSRS implementation.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field

from .cards import ClassifiedCard, Difficulty

NOTE_FIELDS: tuple[str, ...] = (
    "Pergunta",
    "Resposta",
    "Tags",
    "Mnemônico",
    "Dificuldade",
    "Hint",
)

DEFAULT_PRESET_NAME = "3V-Core"


class FSRSPreset(BaseModel):
    """Deck options preset; dumps with the camelCase keys Anki tooling uses."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    desired_retention: float = Field(ge=0.7, le=0.99, alias="desiredRetention")
    learning_steps: list[str] = Field(alias="learningSteps")
    graduating_interval: int = Field(gt=0, alias="graduatingInterval")
    easy_interval: int = Field(gt=0, alias="easyInterval")
    maximum_interval: int = Field(gt=0, alias="maximumInterval")
    new_cards_per_day: int = Field(ge=0, alias="newCardsPerDay")
    maximum_reviews_per_day: int = Field(gt=0, alias="maximumReviewsPerDay")
    fsrs_enabled: Literal[True] = Field(default=True, alias="fsrsEnabled")
    description: str | None = None


DEFAULT_PRESETS: dict[str, FSRSPreset] = {
    "3V-Core": FSRSPreset(
        name="3V-Core",
        desired_retention=0.9,
        learning_steps=["10m", "30m"],
        graduating_interval=1,
        easy_interval=4,
        maximum_interval=180,
        new_cards_per_day=15,
        maximum_reviews_per_day=100,
        description="Anatomia básica do 3V - equilibrado",
    ),
    "3V-Vascular": FSRSPreset(
        name="3V-Vascular",
        desired_retention=0.92,
        learning_steps=["10m", "30m", "1d"],
        graduating_interval=2,
        easy_interval=5,
        maximum_interval=180,
        new_cards_per_day=10,
        maximum_reviews_per_day=80,
        description="Vascularização - retenção maior",
    ),
    "3V-Surgical": FSRSPreset(
        name="3V-Surgical",
        desired_retention=0.93,
        learning_steps=["10m", "30m", "1d"],
        graduating_interval=2,
        easy_interval=5,
        maximum_interval=150,
        new_cards_per_day=8,
        maximum_reviews_per_day=60,
        description="Abordagens cirúrgicas - alta retenção",
    ),
    "3V-Clinical": FSRSPreset(
        name="3V-Clinical",
        desired_retention=0.88,
        learning_steps=["15m", "1h"],
        graduating_interval=1,
        easy_interval=3,
        maximum_interval=120,
        new_cards_per_day=5,
        maximum_reviews_per_day=50,
        description="Casos clínicos - espaçamento maior",
    ),
    "3V-Reference": FSRSPreset(
        name="3V-Reference",
        desired_retention=0.85,
        learning_steps=["30m"],
        graduating_interval=3,
        easy_interval=7,
        maximum_interval=365,
        new_cards_per_day=20,
        maximum_reviews_per_day=150,
        description="Abreviações e referências - manutenção leve",
    ),
}


def preset_for_tags(tags: str) -> str:
    """Pick the FSRS preset name for a card from its tag text."""
    tags_lower = tags.lower()
    if "cirurgico-" in tags_lower:
        return "3V-Surgical"
    if "clinico" in tags_lower or "casos-integrados" in tags_lower:
        return "3V-Clinical"
    if "vascular-" in tags_lower:
        return "3V-Vascular"
    if "abreviacoes" in tags_lower or "mnemonicos" in tags_lower:
        return "3V-Reference"
    return DEFAULT_PRESET_NAME


class CardTemplate(BaseModel):
    name: str
    qfmt: str
    afmt: str


class NoteType(BaseModel):
    name: str
    fields: list[str] = Field(default_factory=lambda: list(NOTE_FIELDS))
    templates: list[CardTemplate] = Field(default_factory=list)
    css: str = ""


class DifficultyCounts(BaseModel):
    E: int = 0
    M: int = 0
    D: int = 0

    @property
    def total(self) -> int:
        return self.E + self.M + self.D

    def add(self, difficulty: Difficulty) -> None:
        setattr(self, difficulty.value, getattr(self, difficulty.value) + 1)

    def percent(self, difficulty: Difficulty) -> float:
        if not self.total:
            return 0.0
        return round(getattr(self, difficulty.value) / self.total * 100, 1)


class DeckConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deck_name: str = Field(alias="deckName")
    note_type_name: str = Field(default="FSRS-3V", alias="noteTypeName")
    preset: str
    total_cards: int = Field(alias="totalCards")
    by_difficulty: DifficultyCounts = Field(alias="byDifficulty")
    export_date: str = Field(alias="exportDate")


def build_deck_config(
    cards: Iterable[ClassifiedCard],
    *,
    deck_name: str,
    note_type_name: str,
    now: datetime | None = None,
) -> DeckConfig:
    """Summarize cards into a deck config; primary preset is the most common one."""
    counts = DifficultyCounts()
    presets: Counter[str] = Counter()
    total = 0
    for card in cards:
        counts.add(card.difficulty)
        presets[preset_for_tags(card.tags)] += 1
        total += 1

    # most_common keeps first-seen order among ties
    primary = presets.most_common(1)[0][0] if presets else DEFAULT_PRESET_NAME
    stamp = (now or datetime.now(timezone.utc)).isoformat()

    return DeckConfig(
        deck_name=deck_name,
        note_type_name=note_type_name,
        preset=primary,
        total_cards=total,
        by_difficulty=counts,
        export_date=stamp,
    )
