from functools import lru_cache

from ..db import get_session
from ..ml.config import RecognizerConfig
from ..ml.matcher import KnnMatcher


def get_db():
    db = get_session()
    try:
        yield db
    finally:
        db.close()


@lru_cache(maxsize=1)
def get_config() -> RecognizerConfig:
    return RecognizerConfig.load()


def get_matcher() -> KnnMatcher:
    return KnnMatcher(get_config())
