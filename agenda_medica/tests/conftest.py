from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from agenda_medica.config import Impostazioni
from agenda_medica.db import crea_engine, crea_session_factory, db_session
from agenda_medica.models import Appuntamento, StatoAppuntamento
from agenda_medica.motore import MotorePrenotazioni
from agenda_medica.orologio import OrologioFisso
from agenda_medica.seed import init_db, seed_base

# id assegnati dal seed (ordine di inserimento)
SMITH = 1   # 09:00-17:00
JONES = 2   # 10:00-18:00
TAYLOR = 3  # 08:00-16:00

ADESSO = datetime(2030, 1, 15, 8, 0)


@pytest.fixture
def session_factory(tmp_path) -> sessionmaker[Session]:
    # file su disco: i thread dei test devono vedere lo stesso DB
    engine = crea_engine(f"sqlite:///{tmp_path / 'test.sqlite'}")
    init_db(engine)
    factory = crea_session_factory(engine)
    seed_base(factory)
    yield factory
    engine.dispose()


@pytest.fixture
def orologio() -> OrologioFisso:
    # ogni lettura avanza di un secondo: timestamp distinti e crescenti
    return OrologioFisso(ADESSO, passo=timedelta(seconds=1))


@pytest.fixture
def oggi(orologio: OrologioFisso) -> date:
    return orologio.oggi()


@pytest.fixture
def domani(oggi: date) -> date:
    return oggi + timedelta(days=1)


@pytest.fixture
def motore(session_factory, orologio) -> MotorePrenotazioni:
    return MotorePrenotazioni(session_factory, Impostazioni(attesa_lock_secondi=5), orologio)


def appuntamenti(factory: sessionmaker[Session], *where) -> list[Appuntamento]:
    with db_session(factory) as s:
        return list(s.scalars(select(Appuntamento).where(*where).order_by(Appuntamento.id)))


def conta_attivi(factory: sessionmaker[Session], *where) -> int:
    with db_session(factory) as s:
        q = select(func.count(Appuntamento.id)).where(Appuntamento.stato == StatoAppuntamento.ATTIVO, *where)
        return s.scalar(q)
