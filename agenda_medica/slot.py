"""
Fasce orarie testuali `H:MM-H:MM` e verifica rispetto all'orario del medico.

Funzioni pure, senza stato condiviso: si possono chiamare fuori dal lock del motore.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import time
from typing import Protocol

_PATTERN_FASCIA = re.compile(r"^([0-9]{1,2}):([0-9]{2})-([0-9]{1,2}):([0-9]{2})$")


class FormatoSlotNonValido(ValueError):
    """La fascia non rispetta il formato H:MM-H:MM (24h) o è vuota."""


class ConOrario(Protocol):
    ora_inizio: time
    ora_fine: time


@dataclass(frozen=True, order=True)
class FasciaOraria:
    inizio: time
    fine: time

    def __str__(self) -> str:
        return f"{self.inizio.hour}:{self.inizio.minute:02d}-{self.fine.hour}:{self.fine.minute:02d}"


def _ora(ore: str, minuti: str, testo: str) -> time:
    try:
        return time(int(ore), int(minuti))
    except ValueError:
        raise FormatoSlotNonValido(f"Orario fuori scala in {testo!r}. Usa H:MM-H:MM") from None


def parse_fascia(testo: str) -> FasciaOraria:
    """
    Converte 'H:MM-H:MM' in FasciaOraria.
    - ora 1-2 cifre, minuti esattamente 2 cifre, orologio 24h
    - inizio strettamente prima della fine
    """
    m = _PATTERN_FASCIA.match((testo or "").strip())
    if not m:
        raise FormatoSlotNonValido(f"Formato non valido: {testo!r}. Usa H:MM-H:MM")

    inizio = _ora(m.group(1), m.group(2), testo)
    fine = _ora(m.group(3), m.group(4), testo)
    if inizio >= fine:
        raise FormatoSlotNonValido(f"La fascia {testo!r} deve terminare dopo l'inizio.")

    return FasciaOraria(inizio, fine)


def entro_orario_lavoro(fascia: FasciaOraria, medico: ConOrario) -> bool:
    return fascia.inizio >= medico.ora_inizio and fascia.fine <= medico.ora_fine
