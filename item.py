from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Grade(str, Enum):
    EASY = 'easy'
    HARD = 'hard'


@dataclass(frozen=True)
class WordItem:
    lemma: str
    translation: str
    category: str = ''
    pos: str = 'other'
    forms: tuple = ()
    grammar: dict = field(default_factory=dict, hash=False, compare=False)
    syntax_note: Optional[str] = None


@dataclass
class WordProgress:
    difficulty: Grade = Grade.HARD
    last_reviewed: int = 0  # wall clock, ms
    streak: int = 0
