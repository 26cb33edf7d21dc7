from __future__ import annotations

from pydantic import BaseModel, Field

from app.modules.anki_export.models.cards import FinalCard
from app.modules.anki_export.models.fsrs import DifficultyCounts


class DeckCSVRequest(BaseModel):
    content: str = Field(..., description="Deck CSV text")
    has_header: bool = Field(default=True, description="First line is a header")
    keep_existing_difficulty: bool = Field(
        default=False, description="Keep valid difficulties already in the CSV"
    )


class ClassifyResponse(BaseModel):
    cards: list[FinalCard] = Field(default_factory=list)
    stats: DifficultyCounts
    attempted: int = 0
    accepted: int = 0
    skipped: int = 0
    hinted: int = 0
