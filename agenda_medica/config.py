from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# DB SQLite su file nella root del progetto
DB_PATH = Path(__file__).resolve().parents[1] / "agenda_medica.sqlite"
DEFAULT_DATABASE_URL = f"sqlite:///{DB_PATH}"

LIVELLI_LOG = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Impostazioni:
    database_url: str = DEFAULT_DATABASE_URL

    # Massimo appuntamenti attivi per medico e giorno
    limite_giornaliero: int = 5

    # Attesa massima (secondi) per ottenere il lock del motore
    attesa_lock_secondi: float = 10.0

    log_level: str = "INFO"


def _intero_positivo(name: str, default: str) -> int:
    raw = os.getenv(name, default).strip()
    try:
        value = int(raw)
    except ValueError as e:
        raise RuntimeError(f"Valore non valido per {name}: {raw!r} (atteso intero).") from e
    if value < 1:
        raise RuntimeError(f"Valore non valido per {name}: {value} (deve essere >= 1).")
    return value


def _secondi(name: str, default: str) -> float:
    raw = os.getenv(name, default).strip()
    try:
        value = float(raw)
    except ValueError as e:
        raise RuntimeError(f"Valore non valido per {name}: {raw!r} (atteso numero di secondi).") from e
    if value <= 0:
        raise RuntimeError(f"Valore non valido per {name}: {value} (deve essere > 0).")
    return value


def carica_impostazioni(dotenv_path: str | None = None) -> Impostazioni:
    # .env nella root; dotenv_path permette di sovrascriverlo nei test
    load_dotenv(dotenv_path=dotenv_path, override=False)

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in LIVELLI_LOG:
        raise RuntimeError(f"Valore non valido per LOG_LEVEL: {log_level!r}")

    return Impostazioni(
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL).strip() or DEFAULT_DATABASE_URL,
        limite_giornaliero=_intero_positivo("LIMITE_GIORNALIERO", "5"),
        attesa_lock_secondi=_secondi("ATTESA_LOCK_SECONDI", "10"),
        log_level=log_level,
    )
