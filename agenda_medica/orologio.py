from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta


class Orologio(ABC):
    """Fonte di data/ora per validazioni e ordinamento a parità di priorità."""

    @abstractmethod
    def adesso(self) -> datetime:
        ...

    def oggi(self) -> date:
        return self.adesso().date()


class OrologioSistema(Orologio):
    def adesso(self) -> datetime:
        return datetime.now()


class OrologioFisso(Orologio):
    """
    Orologio deterministico (test, simulazioni).
    Con `passo` ogni lettura avanza l'ora, così i timestamp restano distinti e crescenti.
    """

    def __init__(self, istante: datetime, passo: timedelta = timedelta(0)) -> None:
        self._istante = istante
        self._passo = passo
        self._lock = threading.Lock()

    def adesso(self) -> datetime:
        with self._lock:
            corrente = self._istante
            self._istante += self._passo
            return corrente

    def oggi(self) -> date:
        with self._lock:
            return self._istante.date()

    def avanza(self, delta: timedelta) -> None:
        with self._lock:
            self._istante += delta
