from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

from app.core.config import settings
from app.modules.anki_export.anki_format import render_import_file
from app.modules.anki_export.pipeline import PipelineConfig, run_pipeline
from .schemas import ClassifyResponse, DeckCSVRequest


router = APIRouter()


def _config(req: DeckCSVRequest) -> PipelineConfig:
    return PipelineConfig(
        has_header=req.has_header,
        keep_existing_difficulty=req.keep_existing_difficulty,
    )


@router.post(
    f"/{settings.app.version}/anki/cards/classify",
    response_model=ClassifyResponse,
    status_code=status.HTTP_200_OK,
    tags=["anki"],
)
async def classify_cards(req: DeckCSVRequest) -> ClassifyResponse:
    result = run_pipeline(req.content, _config(req))
    return ClassifyResponse(
        cards=result.cards,
        stats=result.stats,
        attempted=result.attempted,
        accepted=result.accepted,
        skipped=result.skipped,
        hinted=result.hinted,
    )


@router.post(
    f"/{settings.app.version}/anki/cards/import-file",
    response_class=PlainTextResponse,
    tags=["anki"],
)
async def build_import_file(req: DeckCSVRequest) -> PlainTextResponse:
    """Run the pipeline and return the cards in Anki's text import format."""
    result = run_pipeline(req.content, _config(req))
    text = render_import_file(
        result.cards,
        deck_name=settings.deck.deck_name,
        note_type=settings.deck.note_type,
        tag_prefix=settings.deck.tag_prefix,
    )
    return PlainTextResponse(
        text,
        headers={
            "X-Cards-Accepted": str(result.accepted),
            "X-Cards-Skipped": str(result.skipped),
        },
    )
