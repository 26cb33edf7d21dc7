"""Anki export module exports."""

from .models.cards import CardInput, ClassifiedCard, Difficulty, FinalCard
from .csv_codec import parse_content, parse_line, to_line
from .classifier import classify_difficulty
from .hints import generate_hint
from .pipeline import PipelineConfig, PipelineResult, run_pipeline
from .anki_connect import AnkiConnectClient, AnkiConnectError, AnkiConnectTimeoutError

__all__ = [
    "CardInput",
    "ClassifiedCard",
    "Difficulty",
    "FinalCard",
    "parse_content",
    "parse_line",
    "to_line",
    "classify_difficulty",
    "generate_hint",
    "PipelineConfig",
    "PipelineResult",
    "run_pipeline",
    "AnkiConnectClient",
    "AnkiConnectError",
    "AnkiConnectTimeoutError",
]
