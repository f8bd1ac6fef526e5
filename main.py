import logging
import os
import sys
from pathlib import Path

from flashcard import Flashcard, render_dashboard, render_summary
from learning_plan import live_counts
from review_session import ReviewSession
from templates import Templates
from user_config import UserConfig
from words_db import WordsDB
from words_progress_db import WordsProgressDB


logging.basicConfig(level=logging.INFO, format='%(asctime)s %(name)s %(levelname)s: %(message)s')

KEYS_HELP = '[f]lip  [e]asy  [h]ard  [s]kip  [q]uit'


def run_session(session: ReviewSession, progress_db, templates, uilang, read_key=input):
    while not session.is_finished:
        counts = live_counts(session.items, progress_db.get_progress(session.direction))
        print(render_dashboard(templates, uilang, counts))
        card = Flashcard(session.current_item, session.direction, uilang, templates)
        print(card.front())

        while True:
            key = read_key(f'{KEYS_HELP} > ').strip().lower()
            try:
                if key == 'f':
                    print(card.flip())
                    continue
                elif key == 'e':
                    session.grade('easy')
                elif key == 'h':
                    session.grade('hard')
                elif key == 's':
                    session.grade('none')
                elif key == 'q':
                    session.exit()
                else:
                    print(f'Unknown key "{key}"')
                    continue
            except Exception as e:
                progress_db.release_lock()
                print(f'Error: {e}')
                continue
            break

    summary = session.summary()
    print(render_summary(templates, uilang, summary))
    return summary


def apply_settings(user_config, args):
    """Stores `key=value` study settings, e.g. `session_limit=20 review_strategy=hard_only`."""
    changes = {}
    for arg in args:
        key, sep, value = arg.partition('=')
        if sep == '' or key.strip() == '':
            raise ValueError(f'Expected key=value, got "{arg}"')
        changes[key.strip()] = value.strip()
    if len(changes) == 0:
        raise ValueError('Nothing to set')
    return user_config.set_study_config(**changes)


if __name__ == '__main__':

    user_data_root = os.getenv('RUVOCAB_DATA_ROOT')
    user_data_root = 'resources' if user_data_root is None else user_data_root
    user_data_root = Path(user_data_root)
    words_db_path = user_data_root / 'words.json'
    words_progress_db_path = user_data_root / 'words_progress_db.csv'
    user_config_path = user_data_root / 'user_config.json'

    words_db = WordsDB(words_db_path)
    words_progress_db = WordsProgressDB(words_progress_db_path)
    user_config = UserConfig(user_config_path)
    templates = Templates(str(user_data_root / 'templates'))

    study = user_config.get_study_config()

    if len(sys.argv) > 1 and sys.argv[1] == 'reset':
        n_deleted = words_progress_db.reset_progress(study.direction)
        words_progress_db.save_progress()
        print(f'Progress reset for {study.direction}: {n_deleted} words.')
        sys.exit(0)

    if len(sys.argv) > 1 and sys.argv[1] == 'set':
        try:
            study = apply_settings(user_config, sys.argv[2:])
        except ValueError as e:
            print(f'Error: {e}')
            sys.exit(1)
        print(study.model_dump_json(indent=2))
        sys.exit(0)

    items = words_db.filter_items(category=study.category, pos=study.pos, query=study.query)
    print(f'{len(items)} words, direction {study.direction}, mode {study.review_strategy}')

    session = ReviewSession(items, study.direction, words_progress_db, strategy=study.review_strategy,
                            limit=study.session_limit, workload_threshold=study.workload_threshold).start()
    try:
        run_session(session, words_progress_db, templates, study.ui_language)
    except (KeyboardInterrupt, EOFError):
        print('Exiting.')
        session.exit()
