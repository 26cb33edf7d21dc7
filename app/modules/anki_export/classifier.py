"""Heuristic difficulty classification for deck cards.

Rules are evaluated top to bottom and the first match decides:

- D: clinical cases, integrated reasoning, true/false and comparison prompts,
  or tags that are hard by nature (surgical approaches, herniation, ...).
- E: quick-reference material (abbreviations, mnemonics, ``X = ___``).
- M: everything else, which is most of the anatomy content.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from app.modules.anki_export.models.cards import CardInput, Difficulty

DIFFICULT_MARKERS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"clinico",
        r"casos-integrados",
        r"patologia",
        r"^caso:",
        r"^caso integrador:",
        r"verdadeiro ou falso",
        r"qual a diferença",
        r"por que é mais seguro",
    )
)

DIFFICULT_TAGS = frozenset(
    {
        "cirurgico-abordagem",
        "cirurgico-endoscopia",
        "vascular-clinico",
        "herniacao",
        "aneurisma",
    }
)

EASY_TAGS = frozenset({"abreviacoes", "mnemonicos"})

ABBREVIATION_RE = re.compile(r"^[A-Z.]+\s*=\s*___$")
BLANK_DEFINITION_RE = re.compile(r"= ___$")

QUICK_REVIEW_TAG = "revisao-rapida"
LIST_ITEM_TAG = "atomizado"


@dataclass(frozen=True)
class Rule:
    name: str
    matches: Callable[[CardInput], bool]
    difficulty: Difficulty


def _has_difficult_marker(card: CardInput) -> bool:
    question = card.question.lower()
    tags = card.tags.lower()
    return any(p.search(question) or p.search(tags) for p in DIFFICULT_MARKERS)


def _has_difficult_tag(card: CardInput) -> bool:
    return not DIFFICULT_TAGS.isdisjoint(card.tag_list)


def _has_easy_tag(card: CardInput) -> bool:
    return not EASY_TAGS.isdisjoint(card.tag_list)


def _is_abbreviation_prompt(card: CardInput) -> bool:
    question = card.question.strip()
    return bool(
        ABBREVIATION_RE.search(question) or BLANK_DEFINITION_RE.search(question)
    )


def _has_tag(tag: str) -> Callable[[CardInput], bool]:
    def check(card: CardInput) -> bool:
        return tag in card.tag_list

    return check


def _mentions_percentage(card: CardInput) -> bool:
    return "%" in card.question


DIFFICULTY_RULES: tuple[Rule, ...] = (
    Rule("difficult-marker", _has_difficult_marker, Difficulty.DIFFICULT),
    Rule("difficult-tag", _has_difficult_tag, Difficulty.DIFFICULT),
    Rule("easy-tag", _has_easy_tag, Difficulty.EASY),
    Rule("abbreviation", _is_abbreviation_prompt, Difficulty.EASY),
    Rule("quick-review", _has_tag(QUICK_REVIEW_TAG), Difficulty.MEDIUM),
    Rule("percentage", _mentions_percentage, Difficulty.MEDIUM),
    Rule("list-item", _has_tag(LIST_ITEM_TAG), Difficulty.EASY),
)

DEFAULT_DIFFICULTY = Difficulty.MEDIUM


def match_rule(card: CardInput) -> Rule | None:
    """Return the first rule that matches, or None when the default applies."""
    for rule in DIFFICULTY_RULES:
        if rule.matches(card):
            return rule
    return None


def classify_difficulty(card: CardInput) -> Difficulty:
    rule = match_rule(card)
    return rule.difficulty if rule is not None else DEFAULT_DIFFICULTY
