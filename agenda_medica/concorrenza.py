from __future__ import annotations

import threading
from collections import deque


class LockFIFO:
    """
    Lock esclusivo che concede l'accesso in ordine di arrivo.
    Chi supera `timeout` esce dalla coda senza bloccare chi segue.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._coda: deque[object] = deque()
        self._occupato = False

    def acquire(self, timeout: float | None = None) -> bool:
        with self._cond:
            turno = object()
            self._coda.append(turno)
            ottenuto = self._cond.wait_for(
                lambda: not self._occupato and self._coda[0] is turno,
                timeout=timeout,
            )
            if not ottenuto:
                self._coda.remove(turno)
                # il successivo potrebbe essere diventato primo in coda
                self._cond.notify_all()
                return False

            self._coda.popleft()
            self._occupato = True
            return True

    def release(self) -> None:
        with self._cond:
            if not self._occupato:
                raise RuntimeError("release() su un LockFIFO non acquisito")
            self._occupato = False
            self._cond.notify_all()

    @property
    def in_attesa(self) -> int:
        with self._cond:
            return len(self._coda)

    def locked(self) -> bool:
        with self._cond:
            return self._occupato
