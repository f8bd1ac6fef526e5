from typing import Mapping

import jinja2

from item import WordItem
from review_session import SessionSummary
from words_db import POS_LABELS


def render(templates, uilang: str, template_name: str, **kwargs) -> str:
    message_template = templates.get_template(uilang, template_name)
    template = jinja2.Template(message_template, undefined=jinja2.StrictUndefined)
    return template.render(**kwargs)


class Flashcard:
    """Front and back faces of one word for a study direction.

    'ru-zh' asks for the translation of the lemma, 'zh-ru' asks for the lemma of the translation.
    The back always carries the full word details.
    """

    def __init__(self, word: WordItem, direction: str, uilang: str, templates):
        if direction not in ['ru-zh', 'zh-ru']:
            raise ValueError(f'Unknown direction {direction}')
        self.word = word
        self.direction = direction
        self.uilang = uilang
        self.templates = templates
        self.is_flipped = False

    def front(self) -> str:
        if self.direction == 'ru-zh':
            return render(self.templates, self.uilang, 'card_front', prompt=self.word.lemma,
                          pos_label=POS_LABELS.get(self.word.pos, self.word.pos))
        return render(self.templates, self.uilang, 'card_front', prompt=self.word.translation, pos_label=None)

    def back(self) -> str:
        grammar_tags = [k if v is True else str(v) for k, v in sorted(self.word.grammar.items())
                        if v is not None and v is not False]
        return render(self.templates, self.uilang, 'card_back', lemma=self.word.lemma,
                      translation=self.word.translation, pos_label=POS_LABELS.get(self.word.pos, self.word.pos),
                      grammar_tags=grammar_tags, forms=list(self.word.forms), syntax_note=self.word.syntax_note)

    def flip(self) -> str:
        self.is_flipped = not self.is_flipped
        return self.back() if self.is_flipped else self.front()


def render_dashboard(templates, uilang: str, counts: Mapping[str, int]) -> str:
    return render(templates, uilang, 'dashboard', **counts)


def render_summary(templates, uilang: str, summary: SessionSummary) -> str:
    reason = summary.finish_reason.value if summary.finish_reason is not None else None
    return render(templates, uilang, 'session_summary', reviewed_count=summary.reviewed_count,
                  finish_reason=reason, workload_capped=summary.workload_capped)
