"""
Simulazione di prenotazioni concorrenti sullo stesso slot.

Quattro richieste quasi simultanee (REGOLARE, REGOLARE, VIP, EMERGENZA) arrivano
in quest'ordine: alla fine resta attiva solo quella di emergenza.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, timedelta

from .errori import Esito
from .models import Appuntamento, Priorita
from .motore import MotorePrenotazioni

logger = logging.getLogger(__name__)

FASCIA_SIMULAZIONE = "10:00-10:30"

RICHIESTE = [
    ("User1-Regular", Priorita.REGOLARE),
    ("User2-Regular", Priorita.REGOLARE),
    ("User3-VIP", Priorita.VIP),
    ("User4-Emergency", Priorita.EMERGENZA),
]


@dataclass(frozen=True)
class EsitoSimulazione:
    esiti: list[tuple[str, Esito]]
    attivi: list[Appuntamento]


def simula_prenotazioni_concorrenti(
    motore: MotorePrenotazioni,
    ritardo: float = 0.1,
    giorno: date | None = None,
) -> EsitoSimulazione | None:
    """
    Lancia le quattro richieste su un pool di thread, sfalsate di `ritardo` secondi
    l'una dall'altra. Ritorna None se non ci sono medici.
    """
    medici = motore.lista_medici()
    if not medici:
        logger.warning("Nessun medico disponibile per la simulazione.")
        return None

    medico = medici[0]
    giorno = giorno or motore.orologio.oggi() + timedelta(days=1)

    def richiesta(indice: int, nome: str, priorita: Priorita) -> tuple[str, Esito]:
        time.sleep(indice * ritardo)
        logger.info("Thread-%s prova a prenotare %s...", indice + 1, priorita.name)
        esito = motore.prenota(medico.id, nome, giorno, FASCIA_SIMULAZIONE, priorita)
        if not esito.ok:
            logger.info("Thread-%s: %s", indice + 1, esito.messaggio)
        return nome, esito

    with ThreadPoolExecutor(max_workers=len(RICHIESTE)) as executor:
        futures = [executor.submit(richiesta, i, nome, p) for i, (nome, p) in enumerate(RICHIESTE)]
        esiti = [f.result() for f in futures]

    return EsitoSimulazione(esiti=esiti, attivi=motore.lista_attivi())
