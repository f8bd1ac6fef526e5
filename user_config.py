import json
import threading
from typing import Literal, Union

from pydantic import BaseModel, Field, PositiveInt


class StudyConfig(BaseModel):
    class Config:
        extra = 'forbid'

    direction: Literal['ru-zh', 'zh-ru'] = 'ru-zh'
    review_strategy: Literal['smart_sort', 'sequential', 'random', 'hard_only'] = 'smart_sort'
    session_limit: Union[PositiveInt, Literal['all']] = 'all'
    workload_threshold: int = Field(30, ge=1, description="Hard + learning words above which no new words are shown")
    category: str = 'All'
    pos: str = 'All'
    query: str = ''
    ui_language: str = 'english'


class UserConfig:
    def __init__(self, path):
        self.data_path = path
        with open(self.data_path, 'r', encoding='utf-8') as fp:
            self._user_data = json.loads(fp.read())
        # fail on a bad config at load time rather than mid-session
        self._study_config = StudyConfig.model_validate(self._user_data.get('study', {}))
        self._lock = threading.Lock()

    def get_study_config(self) -> StudyConfig:
        self._lock.acquire()
        cfg_cpy = self._study_config.model_copy()
        self._lock.release()
        return cfg_cpy

    def set_study_config(self, **changes) -> StudyConfig:
        new_config = StudyConfig.model_validate({**self._study_config.model_dump(), **changes})
        self._lock.acquire()
        self._study_config = new_config
        self._user_data['study'] = new_config.model_dump()
        data_str = json.dumps(self._user_data, indent='\t', ensure_ascii=False)
        with open(self.data_path, 'w', encoding='utf-8') as fp:
            fp.write(data_str)
        self._lock.release()
        return new_config

    def release_lock(self):
        if self._lock.locked():
            self._lock.release()
