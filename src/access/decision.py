from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional, Sequence

from src import config


def parse_answer(text: Optional[str], affirmative: Iterable[str] = config.AFFIRMATIVE_ANSWERS) -> bool:
    """True only for an unambiguously affirmative answer; anything else is a denial."""
    if text is None:
        return False
    answer = str(text).strip().lower()
    return answer in {a.strip().lower() for a in affirmative}


class DecisionProvider(ABC):
    """Source of grant/deny decisions for faces that match no enrolled identity.

    Called synchronously by the controller; processing waits until it returns.
    """

    @abstractmethod
    def decide(self, embedding: Sequence[float]) -> bool:
        ...


class StaticDecisionProvider(DecisionProvider):
    """Always answers the same (headless runs)."""

    def __init__(self, allow: bool):
        self.allow = bool(allow)

    def decide(self, embedding: Sequence[float]) -> bool:
        return self.allow


class CallbackDecisionProvider(DecisionProvider):
    def __init__(self, fn: Callable[[Sequence[float]], bool]):
        self._fn = fn

    def decide(self, embedding: Sequence[float]) -> bool:
        return bool(self._fn(embedding))


class TextDecisionProvider(DecisionProvider):
    """Turns a free-text answer (e.g. from a UI text box) into a decision.

    `read_answer` receives the question and returns the raw answer.
    """

    question = "New person detected. Grant access? (y/n): "

    def __init__(
        self,
        read_answer: Callable[[str], Optional[str]],
        affirmative: Iterable[str] = config.AFFIRMATIVE_ANSWERS,
    ):
        self._read_answer = read_answer
        self.affirmative = tuple(affirmative)

    def decide(self, embedding: Sequence[float]) -> bool:
        return parse_answer(self._read_answer(self.question), self.affirmative)
