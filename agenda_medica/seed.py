from __future__ import annotations

from datetime import time

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, sessionmaker

from .db import Base, db_session, get_engine
from .models import Medico

MEDICI = [
    ("Dr. Smith", "Cardiologist", time(9, 0), time(17, 0)),
    ("Dr. Jones", "Dermatologist", time(10, 0), time(18, 0)),
    ("Dr. Taylor", "General Physician", time(8, 0), time(16, 0)),
]


def init_db(bind: Engine | None = None) -> None:
    """Crea le tabelle se non esistono."""
    Base.metadata.create_all(bind=bind or get_engine())


def seed_base(factory: sessionmaker[Session] | None = None) -> int:
    """
    Popola i medici iniziali (idempotente).
    Ritorna quanti medici sono stati inseriti.
    """
    inseriti = 0
    with db_session(factory) as s:
        for nome, spec, inizio, fine in MEDICI:
            exists = s.execute(
                select(Medico).where(Medico.nome == nome, Medico.specializzazione == spec)
            ).scalar_one_or_none()
            if exists is None:
                s.add(Medico(nome=nome, specializzazione=spec, ora_inizio=inizio, ora_fine=fine))
                inseriti += 1
    return inseriti
