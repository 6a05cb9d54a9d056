from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import carica_impostazioni


def crea_engine(database_url: str, echo: bool = False) -> Engine:
    """Engine SQLAlchemy; per SQLite il file viene creato al primo accesso."""
    # SQLite: le connessioni del pool passano tra i thread (API, simulazione)
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(
        database_url,
        echo=echo,              # metti True se vuoi vedere le query
        future=True,
        connect_args=connect_args,
    )


def crea_session_factory(bind: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=bind,
        autoflush=False,
        autocommit=False,
        future=True,
        expire_on_commit=False
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Engine di default dalla configurazione (.env / variabili d'ambiente), creato al primo uso."""
    return crea_engine(carica_impostazioni().database_url)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    return crea_session_factory(get_engine())


class Base(DeclarativeBase):
    """Base ORM per tutti i modelli."""
    pass


@contextmanager
def db_session(factory: sessionmaker[Session] | None = None) -> Iterator[Session]:
    """
    Context manager per gestire correttamente la sessione:
    - commit se tutto ok
    - rollback su eccezioni
    - close sempre
    """
    session: Session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
