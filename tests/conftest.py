"""
Pytest fixtures for the Anki export pipeline tests.
"""
import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from app.modules.anki_export.models.cards import ClassifiedCard, Difficulty, FinalCard


SAMPLE_LINES = [
    "Pergunta,Resposta,Tags,Mnemonico,Dificuldade,Hint",
    "CASO: Paciente com lesão,Compressão do forame de Monro,forame-monro,,,",
    "V.C.I. = ___,Veia Cava Inferior,abreviacoes,,,",
    '"Qual o teto do 3V?","Fórnice, tela coroide",anatomia-teto,,,',
    "Pergunta sem resposta",
    "Em que % dos casos?,Em 30%,anatomia-assoalho,,,",
]


@pytest.fixture
def sample_csv() -> str:
    """Deck CSV with a header, four valid rows and one row missing its answer"""
    return "\n".join(SAMPLE_LINES) + "\n"


@pytest.fixture
def make_card() -> Callable[..., ClassifiedCard]:
    def _make(
        question: str = "O que é X?",
        answer: str = "Resposta",
        tags: str = "anatomia",
        mnemonic: str = "",
        difficulty: Difficulty = Difficulty.DIFFICULT,
    ) -> ClassifiedCard:
        return ClassifiedCard(
            question=question,
            answer=answer,
            tags=tags,
            mnemonic=mnemonic,
            difficulty=difficulty,
        )

    return _make


@pytest.fixture
def final_cards() -> List[FinalCard]:
    return [
        FinalCard(
            question="CASO: Paciente\tcom lesão",
            answer='Compressão do "forame"\nde Monro',
            tags="forame-monro, clinico",
            mnemonic="",
            difficulty=Difficulty.DIFFICULT,
            hint="Pense nas estruturas adjacentes ao forame de Monro",
        ),
        FinalCard(
            question="V.C.I. = ___",
            answer="Veia Cava Inferior",
            tags="abreviacoes",
            difficulty=Difficulty.EASY,
        ),
        FinalCard(
            question="Qual o teto do 3V?",
            answer="Fórnice",
            tags="cirurgico-abordagem",
            difficulty=Difficulty.MEDIUM,
        ),
    ]


class FakeAnkiConnect:
    """In-memory AnkiConnect backend for httpx.MockTransport."""

    def __init__(self, responses: Dict[str, Any] | None = None):
        self.responses: Dict[str, Any] = {"version": 6, "modelNames": []}
        self.responses.update(responses or {})
        self.calls: List[Dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.calls.append(payload)
        result = self.responses.get(payload["action"])
        if callable(result):
            result = result(payload["params"])
        return httpx.Response(200, json={"result": result, "error": None})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def actions(self) -> List[str]:
        return [c["action"] for c in self.calls]

    def params_for(self, action: str) -> List[Dict[str, Any]]:
        return [c["params"] for c in self.calls if c["action"] == action]


@pytest.fixture
def fake_anki() -> FakeAnkiConnect:
    return FakeAnkiConnect()
