from __future__ import annotations

import enum
from dataclasses import dataclass


class CodiceErrore(enum.Enum):
    MEDICO_INESISTENTE = "MEDICO_INESISTENTE"
    PAZIENTE_NON_VALIDO = "PAZIENTE_NON_VALIDO"
    FORMATO_SLOT_NON_VALIDO = "FORMATO_SLOT_NON_VALIDO"
    DATA_PASSATA = "DATA_PASSATA"
    FUORI_ORARIO = "FUORI_ORARIO"
    SLOT_GIA_PRENOTATO = "SLOT_GIA_PRENOTATO"
    LIMITE_GIORNALIERO_SUPERATO = "LIMITE_GIORNALIERO_SUPERATO"
    NON_TROVATO = "NON_TROVATO"


class ErroreArchivio(RuntimeError):
    """Errore del database durante un'operazione: le modifiche sono state annullate."""


class MotoreOccupato(RuntimeError):
    """Il lock del motore non si è liberato entro l'attesa massima."""


@dataclass(frozen=True)
class Esito:
    ok: bool
    appuntamento_id: int | None
    errore: CodiceErrore | None
    messaggio: str
    # id dell'appuntamento annullato per precedenza, se c'è stata sostituzione
    sostituito_id: int | None = None

    @classmethod
    def fallito(cls, errore: CodiceErrore, messaggio: str, appuntamento_id: int | None = None) -> "Esito":
        return cls(False, appuntamento_id, errore, messaggio)

    def as_dict(self) -> dict:
        return {
            "ok": self.ok,
            "appuntamento_id": self.appuntamento_id,
            "errore": self.errore.value if self.errore else None,
            "messaggio": self.messaggio,
            "sostituito_id": self.sostituito_id,
        }
