"""SQLite connection for presets, workout history and stats.

The engine is created on first use.  Tests and ``build_timer`` may
point it elsewhere with :func:`configure_engine` before calling
:func:`init_db`.
"""

from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base, UserStatsRecord

# ── paths ────────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "GoodLift"
DB_PATH = APP_SUPPORT_DIR / "goodlift.db"
DEFAULT_DB_URL = f"sqlite:///{DB_PATH}"

_engine: Engine | None = None
_SessionFactory = None


def _create(url: str) -> Engine:
    return create_engine(
        url,
        connect_args={"check_same_thread": False},
        echo=False,
    )


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _create(DEFAULT_DB_URL)
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Use *url* instead of the on-disk database, e.g. ``sqlite:///:memory:``."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _SessionFactory = None
    _engine = _create(url)


def init_db() -> None:
    """Create missing tables and the single stats row."""
    engine = _get_engine()
    Base.metadata.create_all(engine)

    with _get_session_factory()() as session:
        if session.query(UserStatsRecord).first() is None:
            session.add(UserStatsRecord())
            session.commit()


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    session: OrmSession = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
