from .cards import (
    CardInput,
    ClassifiedCard,
    Difficulty,
    FinalCard,
    RawFields,
    split_tags,
)
from .fsrs import (
    DEFAULT_PRESETS,
    NOTE_FIELDS,
    CardTemplate,
    DeckConfig,
    DifficultyCounts,
    FSRSPreset,
    NoteType,
    build_deck_config,
    preset_for_tags,
)

__all__ = [
    "CardInput",
    "ClassifiedCard",
    "Difficulty",
    "FinalCard",
    "RawFields",
    "split_tags",
    "DEFAULT_PRESETS",
    "NOTE_FIELDS",
    "CardTemplate",
    "DeckConfig",
    "DifficultyCounts",
    "FSRSPreset",
    "NoteType",
    "build_deck_config",
    "preset_for_tags",
]
