import json
import logging
import threading
from typing import List

import pandas as pd

from item import WordItem

logger = logging.getLogger(__name__)

POS_LABELS = {
    'noun': 'Noun',
    'verb': 'Verb',
    'adj': 'Adjective',
    'adv': 'Adverb',
    'pron': 'Pronoun',
    'prep': 'Preposition',
    'num': 'Number',
    'other': 'Other',
}


class WordsDB:
    def __init__(self, db_path):
        self.db_path = db_path
        with open(self.db_path, 'r', encoding='utf-8') as fp:
            categories = json.loads(fp.read())

        rows = []
        for cat in categories:
            for entry in cat['items']:
                rows.append(dict(lemma=entry['lemma'], translation=entry['translation'], category=cat['category'],
                                 pos=entry.get('pos', 'other'), forms=tuple(entry.get('forms', [])),
                                 grammar=entry.get('grammar', {}), syntax_note=entry.get('syntax_note')))
        self.words_df = pd.DataFrame(rows, columns=['lemma', 'translation', 'category', 'pos', 'forms',
                                                    'grammar', 'syntax_note'])
        if not self.words_df['lemma'].is_unique:
            duplicates = self.words_df.loc[self.words_df['lemma'].duplicated(), 'lemma'].to_list()
            raise ValueError(f'"lemma" field in the words database is not unique: {duplicates}')
        unknown_pos = set(self.words_df['pos']) - set(POS_LABELS.keys())
        if len(unknown_pos) > 0:
            raise ValueError(f'Unknown part of speech: {sorted(unknown_pos)}')
        self._categories = [cat['category'] for cat in categories]
        self._lock = threading.Lock()
        logger.info('Loaded %d words in %d categories from %s', len(self.words_df), len(self._categories), db_path)

    def get_words_df(self):
        self._lock.acquire()
        wdf_cpy = self.words_df.copy()
        self._lock.release()
        return wdf_cpy

    def get_categories(self) -> List[str]:
        return ['All'] + list(self._categories)

    def get_items(self) -> List[WordItem]:
        return self.filter_items()

    def filter_items(self, category: str = 'All', pos: str = 'All', query: str = '') -> List[WordItem]:
        """Returns the items matching a category, a part of speech and a free-text query, in content order."""
        words_df = self.get_words_df()
        mask = pd.Series(True, index=words_df.index)
        if category != 'All':
            mask &= words_df['category'] == category
        if pos != 'All':
            mask &= words_df['pos'] == pos
        query = query.strip().lower()
        if len(query) > 0:
            mask &= (words_df['lemma'].str.lower().str.contains(query, regex=False) |
                     words_df['translation'].str.lower().str.contains(query, regex=False))
        return [self._to_item(row) for _, row in words_df[mask].iterrows()]

    @staticmethod
    def _to_item(row) -> WordItem:
        syntax_note = row['syntax_note'] if isinstance(row['syntax_note'], str) else None
        return WordItem(lemma=row['lemma'], translation=row['translation'], category=row['category'],
                        pos=row['pos'], forms=row['forms'], grammar=row['grammar'], syntax_note=syntax_note)

    def release_lock(self):
        if self._lock.locked():
            self._lock.release()
