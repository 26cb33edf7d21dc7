"""Pydantic models for the card stages of the export pipeline.

A card moves through explicit stages: ``RawFields`` (tokenized line) ->
``CardInput`` (validated content) -> ``ClassifiedCard`` (difficulty set) ->
``FinalCard`` (hint set). Each stage is frozen; later stages are built from
earlier ones instead of being mutated in place.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Difficulty(str, Enum):
    EASY = "E"
    MEDIUM = "M"
    DIFFICULT = "D"


def split_tags(tags: str) -> list[str]:
    """Comma-joined tag text -> trimmed, lowercased tokens (order kept)."""
    return [t.strip().lower() for t in tags.split(",") if t.strip()]


class RawFields(BaseModel):
    """Field values of one CSV line, before any validation."""

    model_config = ConfigDict(frozen=True)

    line_no: int
    values: list[str] = Field(default_factory=list)

    def get(self, index: int, default: str = "") -> str:
        if index < len(self.values):
            return self.values[index]
        return default


class CardInput(BaseModel):
    """Question/answer content as authored in the deck CSV."""

    model_config = ConfigDict(frozen=True)

    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    tags: str = ""
    mnemonic: str = ""

    @field_validator("question", "answer")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @property
    def tag_list(self) -> list[str]:
        return split_tags(self.tags)


class ClassifiedCard(CardInput):
    difficulty: Difficulty


class FinalCard(ClassifiedCard):
    """Card ready for serialization. Only difficult cards carry a hint."""

    hint: str = ""

    @model_validator(mode="after")
    def _hint_only_for_difficult(self) -> "FinalCard":
        if self.hint and self.difficulty is not Difficulty.DIFFICULT:
            raise ValueError(
                f"hint is only allowed on difficulty 'D', got '{self.difficulty.value}'"
            )
        return self
