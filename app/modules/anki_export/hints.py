"""Hint generation for difficult (D) cards.

Hints nudge the reasoning without giving the answer away. A short mnemonic is
the best hint when the card has one; otherwise curated rules keyed on the
question wording and tags pick a cue, falling back to a generic one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from app.modules.anki_export.models.cards import ClassifiedCard, Difficulty

MNEMONIC_MIN_LENGTH = 3
MNEMONIC_MAX_LENGTH = 20
FALLBACK_HINT = "Revise o conceito central deste tópico"

HintText = Union[str, Callable[[ClassifiedCard], str]]


@dataclass(frozen=True)
class HintRule:
    name: str
    matches: Callable[[ClassifiedCard], bool]
    hint: HintText

    def render(self, card: ClassifiedCard) -> str:
        if callable(self.hint):
            return self.hint(card)
        return self.hint


def _q(card: ClassifiedCard) -> str:
    return card.question.lower()


def _a(card: ClassifiedCard) -> str:
    return card.answer.lower()


def _t(card: ClassifiedCard) -> str:
    return card.tags.lower()


def _tags_have(*parts: str) -> Callable[[ClassifiedCard], bool]:
    """All of ``parts`` occur somewhere in the tag text."""

    def check(card: ClassifiedCard) -> bool:
        tags = _t(card)
        return all(p in tags for p in parts)

    return check


def _question_has(*parts: str) -> Callable[[ClassifiedCard], bool]:
    """Any of ``parts`` occurs in the question."""

    def check(card: ClassifiedCard) -> bool:
        question = _q(card)
        return any(p in question for p in parts)

    return check


def _all(*checks: Callable[[ClassifiedCard], bool]) -> Callable[[ClassifiedCard], bool]:
    return lambda card: all(c(card) for c in checks)


def _any(*checks: Callable[[ClassifiedCard], bool]) -> Callable[[ClassifiedCard], bool]:
    return lambda card: any(c(card) for c in checks)


def _is_case(card: ClassifiedCard) -> bool:
    return _q(card).startswith("caso:")


def _has_short_mnemonic(card: ClassifiedCard) -> bool:
    m = card.mnemonic
    return MNEMONIC_MIN_LENGTH <= len(m) <= MNEMONIC_MAX_LENGTH and "=" not in m


def _answer_has(part: str) -> Callable[[ClassifiedCard], bool]:
    return lambda card: part in _a(card)


def _has_sequence_mnemonic(card: ClassifiedCard) -> bool:
    return bool(card.mnemonic) and len(card.mnemonic.split("-")) > 1


_approach = _tags_have("cirurgico-abordagem")
_vascular_clinical_artery = _tags_have("vascular-arterias", "clinico")

HINT_RULES: tuple[HintRule, ...] = (
    HintRule("mnemonic", _has_short_mnemonic, lambda c: f"Lembre-se: {c.mnemonic}"),
    # clinical cases
    HintRule(
        "case-foramen-monro",
        _all(_is_case, _tags_have("forame-monro")),
        "Pense nas estruturas adjacentes ao forame de Monro",
    ),
    HintRule(
        "case-vascular",
        _all(_is_case, _tags_have("vascular", "clinico")),
        "Considere as consequências do comprometimento vascular",
    ),
    HintRule(
        "case-surgical",
        _all(_is_case, _any(_tags_have("cirurgico"), _tags_have("abordagem"))),
        "Qual estrutura está em risco nesta região?",
    ),
    HintRule("case", _is_case, "Analise a localização anatômica e estruturas adjacentes"),
    HintRule(
        "true-false",
        _question_has("verdadeiro ou falso"),
        "Cuidado com a afirmação - verifique cada termo",
    ),
    # surgical approaches
    HintRule(
        "approach-transchoroidal",
        _all(_approach, _tags_have("transchoroidal")),
        "Via transchoroidal = pelo fórnice",
    ),
    HintRule(
        "approach-interforniceal",
        _all(_approach, _tags_have("interforniceal")),
        "Interforniceal = entre os fórnices, preservando colunas",
    ),
    HintRule(
        "approach-translaminar",
        _all(_approach, _tags_have("translaminar")),
        "Translaminar = através da lâmina terminal",
    ),
    HintRule(
        "approach-preservation",
        _all(_approach, _question_has("preservar", "preservada")),
        "Liste mentalmente as estruturas nobres da região",
    ),
    HintRule(
        "approach-landmarks",
        _all(_approach, _question_has("estrutura")),
        "Pense nos marcos anatômicos desta abordagem",
    ),
    HintRule("approach", _approach, "Qual é o princípio desta abordagem?"),
    HintRule(
        "pathology",
        _any(_tags_have("patologia"), _tags_have("herniacao")),
        "Considere a fisiopatologia do processo",
    ),
    HintRule(
        "syndrome",
        _any(_question_has("tríade", "síndrome", "3 hs"), _answer_has("3 hs")),
        "Mnemônico: 3 Hs (Hemi-)",
    ),
    HintRule(
        "anterior-choroidal-infarct",
        _all(_vascular_clinical_artery, _question_has("acha", "coroidal anterior")),
        "Lembre: 3 Hs - cápsula, tálamo, via óptica",
    ),
    HintRule(
        "arterial-territory",
        _vascular_clinical_artery,
        "Quais territórios esta artéria irriga?",
    ),
    HintRule("choroidal-fissure", _tags_have("fissura"), "Fissura = fenda entre fórnice e tálamo"),
    HintRule(
        "venous-sacrifice",
        _all(_tags_have("veias"), _question_has("sacrific")),
        "Pense no limite seguro de sacrifício venoso",
    ),
    HintRule("callosum", _tags_have("caloso"), "Secção anterior é mais segura"),
    HintRule(
        "percentage",
        _question_has("%", "máximo"),
        "Lembre-se do valor numérico aproximado",
    ),
    HintRule(
        "internal-cerebral-vein",
        _all(_any(_tags_have("vci"), _answer_has("vci")), _tags_have("clinico")),
        "VCI bilateral = consequência grave",
    ),
    HintRule(
        "comparison",
        _question_has("qual a diferença", "por que é mais"),
        "Compare as características principais",
    ),
    HintRule(
        "list-sequence",
        _all(_tags_have("atomizado"), _has_sequence_mnemonic),
        lambda c: f"Sequência: {c.mnemonic}",
    ),
    HintRule("list-item", _tags_have("atomizado"), "Pense na sequência completa"),
)


def match_hint_rule(card: ClassifiedCard) -> HintRule | None:
    for rule in HINT_RULES:
        if rule.matches(card):
            return rule
    return None


def generate_hint(card: ClassifiedCard) -> str:
    """Derive the hint for a difficult card."""
    if card.difficulty is not Difficulty.DIFFICULT:
        raise ValueError(
            f"hints are only generated for difficulty 'D', got '{card.difficulty.value}'"
        )
    rule = match_hint_rule(card)
    return rule.render(card) if rule is not None else FALLBACK_HINT
