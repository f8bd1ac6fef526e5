import logging
import os.path
import threading
from typing import Callable, Dict, Optional

import pandas as pd

from item import Grade, WordProgress

logger = logging.getLogger(__name__)

PROGRESS_COLUMNS = ['direction', 'lemma', 'difficulty', 'last_reviewed', 'streak']


def progress_key(direction: str, lemma: str) -> str:
    return f'{direction}:{lemma}'


class WordsProgressDB:
    def __init__(self, db_path):
        self.db_path = db_path
        self._lock = threading.Lock()
        if not os.path.exists(self.db_path):
            self.progress_df = pd.DataFrame(columns=PROGRESS_COLUMNS)
            self.save_progress()
        self.progress_df = self._read_progress(self.db_path)

    @staticmethod
    def _read_progress(db_path) -> pd.DataFrame:
        # progress is best-effort: anything unreadable means every word is new
        try:
            progress_df = pd.read_csv(db_path, dtype={'direction': str, 'lemma': str, 'difficulty': str},
                                      keep_default_na=False)
            missing = set(PROGRESS_COLUMNS) - set(progress_df.columns)
            if len(missing) > 0:
                raise ValueError(f'missing columns {sorted(missing)}')
            progress_df = progress_df[PROGRESS_COLUMNS].copy()
            if not progress_df['difficulty'].isin([g.value for g in Grade]).all():
                raise ValueError('unknown difficulty value')
            progress_df['last_reviewed'] = progress_df['last_reviewed'].astype('int64')
            progress_df['streak'] = progress_df['streak'].astype('int64')
            if (progress_df['streak'] < 0).any():
                raise ValueError('negative streak')
            if progress_df.duplicated(subset=['direction', 'lemma']).any():
                raise ValueError('duplicate progress keys')
        except (OSError, ValueError, pd.errors.EmptyDataError, pd.errors.ParserError) as e:
            logger.warning('Could not read progress from %s, starting from scratch: %s', db_path, e)
            progress_df = pd.DataFrame(columns=PROGRESS_COLUMNS)
        return progress_df.reset_index(drop=True)

    def get_progress_df(self):
        self._lock.acquire()
        pdf_cpy = self.progress_df.copy()
        self._lock.release()
        return pdf_cpy

    def save_progress(self):
        self._lock.acquire()
        try:
            self.progress_df.to_csv(self.db_path, index=False)
        finally:
            self._lock.release()

    def get_progress(self, direction: str) -> Dict[str, WordProgress]:
        """Returns a snapshot of all records for a direction, keyed by lemma."""
        self._lock.acquire()
        rows = self.progress_df.loc[self.progress_df['direction'] == direction]
        res = {row['lemma']: WordProgress(difficulty=Grade(row['difficulty']), last_reviewed=int(row['last_reviewed']),
                                          streak=int(row['streak']))
               for _, row in rows.iterrows()}
        self._lock.release()
        return res

    def get_word_progress(self, direction: str, lemma: str) -> Optional[WordProgress]:
        return self.get_progress(direction).get(lemma)

    def _row_mask(self, direction, lemma):
        mask = (self.progress_df['direction'] == direction) & (self.progress_df['lemma'] == lemma)
        n_rows = int(mask.sum())
        if n_rows > 1:
            raise ValueError(f'Number of rows for "{progress_key(direction, lemma)}" must be at most 1, found {n_rows}.')
        return mask, n_rows

    def _write_row(self, direction, lemma, item: WordProgress, mask, n_rows):
        if n_rows == 0:
            self.progress_df.loc[len(self.progress_df)] = \
                {'direction': direction, 'lemma': lemma, 'difficulty': item.difficulty.value,
                 'last_reviewed': item.last_reviewed, 'streak': item.streak}
        else:
            self.progress_df.loc[mask, 'difficulty'] = item.difficulty.value
            self.progress_df.loc[mask, 'last_reviewed'] = item.last_reviewed
            self.progress_df.loc[mask, 'streak'] = item.streak

    def set_word_progress(self, direction: str, lemma: str, item: WordProgress) -> None:
        with self._lock:
            mask, n_rows = self._row_mask(direction, lemma)
            self._write_row(direction, lemma, item, mask, n_rows)

    def update_word_progress(self, direction: str, lemma: str,
                             update: Callable[[Optional[WordProgress]], WordProgress]) -> WordProgress:
        """Applies `update` to the current record of a word (None if it was never graded) and stores the result."""
        with self._lock:
            mask, n_rows = self._row_mask(direction, lemma)
            current = None
            if n_rows == 1:
                row = self.progress_df[mask].iloc[0]
                current = WordProgress(difficulty=Grade(row['difficulty']), last_reviewed=int(row['last_reviewed']),
                                       streak=int(row['streak']))
            item = update(current)
            self._write_row(direction, lemma, item, mask, n_rows)
        return item

    def reset_progress(self, direction: str) -> int:
        """Deletes every record of a direction, returns the number of deleted records."""
        self._lock.acquire()
        mask = self.progress_df['direction'] == direction
        n_deleted = int(mask.sum())
        self.progress_df = self.progress_df[~mask].reset_index(drop=True)
        self._lock.release()
        logger.info('Reset %d progress records for direction %s', n_deleted, direction)
        return n_deleted

    def release_lock(self):
        if self._lock.locked():
            self._lock.release()
