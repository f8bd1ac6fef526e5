"""Card selection for review sessions.

Every pick buckets the pool into four groups from the stored progress, scores
each non-empty group with a base priority plus a bonus for the ticks elapsed
since the group was last picked, draws a group by weight and finally draws one
of the least recently reviewed words of that group.
"""
import logging
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from item import Grade, WordItem, WordProgress

logger = logging.getLogger(__name__)


class Group(str, Enum):
    NEW = 'new'
    HARD = 'hard'
    LEARNING = 'learning'
    MASTERED = 'mastered'


# walk order of the weighted draw
GROUP_ORDER = [Group.HARD, Group.LEARNING, Group.NEW, Group.MASTERED]

BASE_WEIGHTS = {
    Group.NEW: 40,
    Group.HARD: 100,
    Group.LEARNING: 60,
    Group.MASTERED: 5,
}
STALENESS_BONUS = 2
MASTERED_STREAK = 3
PICK_WINDOW = 3


def classify_progress(record: Optional[WordProgress]) -> Group:
    if record is None:
        return Group.NEW
    if record.difficulty == Grade.HARD or record.streak == 0:
        return Group.HARD
    if record.streak < MASTERED_STREAK:
        return Group.LEARNING
    return Group.MASTERED


def classify(items: List[WordItem], progress: Mapping[str, WordProgress]) -> Dict[Group, List[WordItem]]:
    """Splits the pool into the four groups, keeping pool order inside each group."""
    buckets = {group: [] for group in Group}
    for item in items:
        buckets[classify_progress(progress.get(item.lemma))].append(item)
    return buckets


def live_counts(items: List[WordItem], progress: Mapping[str, WordProgress]) -> Dict[str, int]:
    buckets = classify(items, progress)
    return {group.value: len(buckets[group]) for group in Group}


def active_count(buckets: Mapping[Group, List[WordItem]]) -> int:
    return len(buckets[Group.HARD]) + len(buckets[Group.LEARNING])


def is_capped(active: int, threshold: int) -> bool:
    return active >= threshold


def compute_weights(buckets: Mapping[Group, List[WordItem]], staleness: Mapping[Group, int],
                    capped: bool) -> Dict[Group, float]:
    weights = {}
    for group in Group:
        if len(buckets[group]) == 0 or (group == Group.NEW and capped):
            weights[group] = 0.0
        else:
            weights[group] = float(BASE_WEIGHTS[group] + max(0, staleness.get(group, 0)) * STALENESS_BONUS)
    return weights


def select_group(weights: Mapping[Group, float], rng: np.random.Generator) -> Optional[Group]:
    total = sum(weights.values())
    if total <= 0:
        return None
    draw = rng.random() * total
    cumulative = 0.0
    for group in GROUP_ORDER:
        weight = weights.get(group, 0.0)
        if weight <= 0:
            continue
        cumulative += weight
        if draw < cumulative:
            return group
    # float rounding can leave the draw on the upper edge, fall back to the last eligible group
    return [group for group in GROUP_ORDER if weights.get(group, 0.0) > 0][-1]


def pick_item(group_items: List[WordItem], progress: Mapping[str, WordProgress],
              rng: np.random.Generator) -> WordItem:
    """Returns one of the PICK_WINDOW least recently reviewed words, uniformly."""
    if len(group_items) == 0:
        raise ValueError('Cannot pick an item from an empty group.')

    def last_reviewed(item):
        record = progress.get(item.lemma)
        return record.last_reviewed if record is not None else 0

    oldest = sorted(group_items, key=last_reviewed)[:min(PICK_WINDOW, len(group_items))]
    return oldest[int(rng.integers(len(oldest)))]


def next_progress(record: Optional[WordProgress], grade: Grade, now_ms: int) -> WordProgress:
    grade = Grade(grade)
    current_streak = record.streak if record is not None else 0
    new_streak = 0 if grade == Grade.HARD else current_streak + 1
    return WordProgress(difficulty=grade, last_reviewed=now_ms, streak=new_streak)


class LearningPlan:
    def __init__(self, workload_threshold: int, rng: Optional[np.random.Generator] = None):
        self.workload_threshold = workload_threshold
        self.rng = rng if rng is not None else np.random.default_rng()

    def pick_next(self, items: List[WordItem], progress: Mapping[str, WordProgress], tick: int,
                  last_picked: Mapping[Group, int]) -> Tuple[Optional[Group], Optional[WordItem], bool]:
        """Runs one pick cycle, returns the picked group and word (both None if nothing is eligible) and the cap flag."""
        buckets = classify(items, progress)
        capped = is_capped(active_count(buckets), self.workload_threshold)
        staleness = {group: max(0, tick - last_picked.get(group, 0)) for group in Group}
        weights = compute_weights(buckets, staleness, capped)
        group = select_group(weights, self.rng)
        if group is None:
            logger.debug('No eligible group at tick %d (capped=%s)', tick, capped)
            return None, None, capped
        return group, pick_item(buckets[group], progress, self.rng), capped
