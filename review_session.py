import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

import numpy as np

from item import Grade, WordItem
from learning_plan import Group, LearningPlan, classify, next_progress
from words_progress_db import WordsProgressDB

logger = logging.getLogger(__name__)

STRATEGIES = ['smart_sort', 'sequential', 'random', 'hard_only']


class SessionState(str, Enum):
    INITIALIZING = 'initializing'
    PRESENTING = 'presenting'
    GRADING = 'grading'
    FINISHED = 'finished'


class FinishReason(str, Enum):
    LIMIT_REACHED = 'limit_reached'
    NO_ELIGIBLE_ITEMS = 'no_eligible_items'
    EXITED = 'exited'


class SessionFinishedError(RuntimeError):
    pass


@dataclass
class SessionSummary:
    reviewed_count: int
    is_finished: bool
    workload_capped: bool
    finish_reason: Optional[FinishReason] = None


def now_ms() -> int:
    return int(time.time() * 1000)


class ReviewSession:
    """One review session over a fixed pool of words.

    `smart_sort` picks every next word adaptively from the stored progress, the other
    strategies walk a queue computed once at start. `limit` is a positive number of
    reviews or 'all'.
    """

    def __init__(self, items: List[WordItem], direction: str, progress_db: WordsProgressDB,
                 strategy: str = 'smart_sort', limit: Union[int, str] = 'all', workload_threshold: int = 30,
                 rng: Optional[np.random.Generator] = None, clock=now_ms):
        if strategy not in STRATEGIES:
            raise ValueError(f'Unknown review strategy {strategy}')
        self.items = list(items)
        self.direction = direction
        self.progress_db = progress_db
        self.strategy = strategy
        self.limit = None if limit == 'all' else limit
        self.rng = rng if rng is not None else np.random.default_rng()
        self.clock = clock
        self.plan = LearningPlan(workload_threshold, rng=self.rng)

        self.state = SessionState.INITIALIZING
        self.current_item = None
        self.current_group = None
        self.tick = 0
        self.last_picked = {group: 0 for group in Group}
        self.reviewed_count = 0
        self.workload_capped = False
        self.finish_reason = None
        self._queue = []
        self._queue_pos = 0

    def start(self) -> 'ReviewSession':
        self.tick = 0
        self.last_picked = {group: 0 for group in Group}
        self.reviewed_count = 0
        if self.strategy != 'smart_sort':
            self._queue = self._build_queue()
            self._queue_pos = 0
        self._advance()
        return self

    def _build_queue(self) -> List[WordItem]:
        candidates = list(self.items)
        if self.strategy == 'hard_only':
            buckets = classify(candidates, self.progress_db.get_progress(self.direction))
            candidates = buckets[Group.HARD]
            candidates = [candidates[i] for i in self.rng.permutation(len(candidates))]
        elif self.strategy == 'random':
            candidates = [candidates[i] for i in self.rng.permutation(len(candidates))]
        return candidates

    def _advance(self) -> None:
        if self.strategy == 'smart_sort':
            progress = self.progress_db.get_progress(self.direction)
            group, item, self.workload_capped = self.plan.pick_next(self.items, progress, self.tick, self.last_picked)
            if group is not None:
                self.last_picked[group] = self.tick
            self.current_group = group
        else:
            item = self._queue[self._queue_pos] if self._queue_pos < len(self._queue) else None
            self._queue_pos += 1

        if item is None:
            self._finish(FinishReason.NO_ELIGIBLE_ITEMS)
        else:
            self.current_item = item
            self.state = SessionState.PRESENTING

    def _finish(self, reason: FinishReason) -> None:
        self.state = SessionState.FINISHED
        self.current_item = None
        self.current_group = None
        self.finish_reason = reason
        logger.info('Session finished (%s) after %d reviews', reason.value, self.reviewed_count)

    @property
    def is_finished(self) -> bool:
        return self.state == SessionState.FINISHED

    def grade(self, decision: Optional[str]) -> 'ReviewSession':
        """Records the grade of the current word ('easy', 'hard', or 'none'/None to skip) and moves on."""
        if self.is_finished:
            raise SessionFinishedError('The session has already finished.')
        if decision is not None and decision != 'none' and decision not in [g.value for g in Grade]:
            raise ValueError(f'Unknown grade {decision}')

        self.state = SessionState.GRADING
        if decision is not None and decision != 'none':
            grade, reviewed_at = Grade(decision), self.clock()
            self.progress_db.update_word_progress(self.direction, self.current_item.lemma,
                                                  lambda record: next_progress(record, grade, reviewed_at))
            self.progress_db.save_progress()
        self.reviewed_count += 1

        if self.limit is not None and self.reviewed_count >= self.limit:
            self._finish(FinishReason.LIMIT_REACHED)
            return self

        self.tick += 1
        self._advance()
        return self

    def exit(self) -> SessionSummary:
        # the word on screen is left ungraded and leaves no record
        if not self.is_finished:
            self._finish(FinishReason.EXITED)
        return self.summary()

    def summary(self) -> SessionSummary:
        # capped only counts when the cap is what ran the session dry
        capped = self.workload_capped and self.finish_reason == FinishReason.NO_ELIGIBLE_ITEMS
        return SessionSummary(reviewed_count=self.reviewed_count, is_finished=self.is_finished,
                              workload_capped=capped, finish_reason=self.finish_reason)


def init_session(items: List[WordItem], direction: str, strategy: str, limit: Union[int, str],
                 workload_threshold: int, progress_db: WordsProgressDB,
                 rng: Optional[np.random.Generator] = None) -> ReviewSession:
    return ReviewSession(items, direction, progress_db, strategy=strategy, limit=limit,
                         workload_threshold=workload_threshold, rng=rng).start()
