import logging
from contextlib import contextmanager
from sqlmodel import SQLModel, Session, create_engine

from .config import load_settings

logger = logging.getLogger(__name__)

_ENGINE = None
_ENGINE_URL = None  # switch engines when TASKNOTES_DB_PATH changes


def _compute_url() -> str:
    settings = load_settings()
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    return settings.db_url


def get_engine():
    global _ENGINE, _ENGINE_URL
    url = _compute_url()
    if _ENGINE is None or _ENGINE_URL != url:
        if _ENGINE is not None:
            _ENGINE.dispose()
        logger.debug("opening database %s", url)
        _ENGINE = create_engine(url, echo=False)
        _ENGINE_URL = url
    return _ENGINE


def reset_engine():
    """For tests: drop the cached engine so a new TASKNOTES_DB_PATH is picked up."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None


def init_db():
    from . import models  # noqa: F401  register tables on the metadata

    engine = get_engine()
    SQLModel.metadata.create_all(engine)


def get_session():
    # keep objects alive after commit so returned models retain values
    return Session(get_engine(), expire_on_commit=False)


@contextmanager
def session_scope():
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
