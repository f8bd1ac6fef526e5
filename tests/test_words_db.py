import json

import pytest

from conftest import RESOURCES
from words_db import WordsDB


@pytest.fixture
def words_db():
    return WordsDB(RESOURCES / 'words.json')


def test_load_bundled_words(words_db):
    items = words_db.get_items()
    assert len(items) == 17
    assert items[0].lemma == 'понедельник'
    assert items[0].category == 'Time: Days, Months & Seasons'
    assert words_db.get_categories()[0] == 'All'
    assert 'Daily Phrases' in words_db.get_categories()


def test_optional_fields(words_db):
    study = [item for item in words_db.get_items() if item.lemma == 'учиться'][0]
    assert study.forms == ('учусь', 'учишься')
    assert study.grammar == {'conjugation': 'II', 'reflexive': True}
    assert study.syntax_note == 'где? (at school/uni)'
    hello = [item for item in words_db.get_items() if item.lemma == 'привет'][0]
    assert hello.forms == ()
    assert hello.syntax_note is None


def test_filter_by_category_and_pos(words_db):
    adjectives = words_db.filter_items(category='Common Adjectives')
    assert [item.lemma for item in adjectives] == ['хороший', 'плохой', 'большой']
    verbs = words_db.filter_items(pos='verb')
    assert [item.lemma for item in verbs] == ['учиться', 'изучать']
    assert words_db.filter_items(category='Common Adjectives', pos='verb') == []


def test_filter_by_query(words_db):
    assert [item.lemma for item in words_db.filter_items(query='УЧ')] == ['учиться', 'изучать']
    assert [item.lemma for item in words_db.filter_items(query='星期五')] == ['пятница']
    assert [item.lemma for item in words_db.filter_items(query='(tr.')] == ['изучать']
    assert len(words_db.filter_items(query='   ')) == 17


def test_duplicate_lemma_rejected(tmp_path):
    path = tmp_path / 'words.json'
    path.write_text(json.dumps([
        {'category': 'a', 'items': [{'lemma': 'год', 'translation': '年', 'pos': 'noun'}]},
        {'category': 'b', 'items': [{'lemma': 'год', 'translation': '年', 'pos': 'noun'}]},
    ]), encoding='utf-8')
    with pytest.raises(ValueError):
        WordsDB(path)


def test_unknown_pos_rejected(tmp_path):
    path = tmp_path / 'words.json'
    path.write_text(json.dumps([{'category': 'a', 'items': [{'lemma': 'x', 'translation': 'y', 'pos': 'gerund'}]}]),
                    encoding='utf-8')
    with pytest.raises(ValueError):
        WordsDB(path)
