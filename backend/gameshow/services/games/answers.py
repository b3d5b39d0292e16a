"""Answer values and the normalization used to compare them.

A client may answer with the position of a choice or with free text. Both are
reduced to a trimmed, lower-cased string before comparison; an index that
addresses one of the question's choices compares as that choice's text.
"""
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union


@dataclass(frozen=True)
class IndexAnswer:
    index: int


@dataclass(frozen=True)
class TextAnswer:
    text: str


AnswerValue = Union[IndexAnswer, TextAnswer]


def parse_answer(raw: Any) -> AnswerValue:
    if isinstance(raw, (IndexAnswer, TextAnswer)):
        return raw
    if raw is None:
        return TextAnswer('')
    if isinstance(raw, bool):
        raise ValueError(f'unsupported answer value: {raw!r}')
    if isinstance(raw, int):
        return IndexAnswer(raw)
    if isinstance(raw, float):
        if raw.is_integer():
            return IndexAnswer(int(raw))
        raise ValueError(f'unsupported answer value: {raw!r}')
    if isinstance(raw, str):
        return TextAnswer(raw)
    raise ValueError(f'unsupported answer value: {raw!r}')


def normalize_answer(value: AnswerValue, choices: Optional[Sequence[Any]] = None) -> str:
    if isinstance(value, IndexAnswer):
        if choices is not None and 0 <= value.index < len(choices) and choices[value.index] is not None:
            text = str(choices[value.index])
        else:
            text = str(value.index)
    else:
        text = value.text
    return text.strip().lower()


def answers_match(submitted: Any, correct: Any, choices: Optional[Sequence[Any]] = None) -> bool:
    """Compare two raw answers. Raises ValueError for values that cannot be parsed."""
    return normalize_answer(parse_answer(submitted), choices) == normalize_answer(parse_answer(correct), choices)
