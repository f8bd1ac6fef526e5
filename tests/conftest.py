from pathlib import Path

import numpy as np
import pytest

from item import Grade, WordItem, WordProgress
from words_progress_db import WordsProgressDB

RESOURCES = Path(__file__).parent.parent / 'resources'


def make_items(n, prefix='w'):
    return [WordItem(lemma=f'{prefix}{i}', translation=f't{i}', category='test', pos='noun') for i in range(n)]


def record(streak, difficulty=Grade.EASY, last_reviewed=0):
    return WordProgress(difficulty=difficulty, last_reviewed=last_reviewed, streak=streak)


class FakeClock:
    def __init__(self, start=1_000):
        self.now = start

    def __call__(self):
        self.now += 1
        return self.now


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def progress_db(tmp_path):
    return WordsProgressDB(tmp_path / 'words_progress_db.csv')


@pytest.fixture
def clock():
    return FakeClock()
