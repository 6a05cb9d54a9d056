"""
Motore prenotazioni: prenotazione, annullamento, spostamento e vista a priorità.

Tutte le operazioni passano da un unico lock esclusivo (FIFO) tenuto per l'intera
durata, letture e scritture sul DB comprese. È un punto di serializzazione voluto:
la risoluzione dei conflitti è leggi-decidi-scrivi e non deve intrecciarsi con
un'altra operazione.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .archivio import ArchivioAppuntamenti
from .concorrenza import LockFIFO
from .config import Impostazioni
from .db import db_session
from .errori import CodiceErrore, ErroreArchivio, Esito, MotoreOccupato
from .models import Appuntamento, Medico, Priorita, StatoAppuntamento
from .orologio import Orologio, OrologioSistema
from .slot import FormatoSlotNonValido, entro_orario_lavoro, parse_fascia

logger = logging.getLogger(__name__)


class MotorePrenotazioni:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        impostazioni: Impostazioni | None = None,
        orologio: Orologio | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.impostazioni = impostazioni or Impostazioni()
        self.orologio = orologio or OrologioSistema()
        self._lock = LockFIFO()

    @contextmanager
    def _operazione(self, nome: str) -> Iterator[ArchivioAppuntamenti]:
        """Lock del motore + una transazione; errori DB diventano ErroreArchivio dopo il rollback."""
        attesa = self.impostazioni.attesa_lock_secondi
        if not self._lock.acquire(timeout=attesa):
            logger.warning("%s: motore occupato, lock non ottenuto entro %s s", nome, attesa)
            raise MotoreOccupato(f"{nome}: motore occupato, riprova più tardi.")
        try:
            with db_session(self._session_factory) as s:
                yield ArchivioAppuntamenti(s)
        except SQLAlchemyError as e:
            logger.warning("%s: errore database, modifiche annullate (%s)", nome, e)
            raise ErroreArchivio(f"{nome}: errore database, operazione annullata.") from e
        finally:
            self._lock.release()

    # =========================
    # Letture
    # =========================
    def lista_medici(self) -> list[Medico]:
        with self._operazione("lista_medici") as a:
            return a.lista_medici()

    def trova_medico(self, medico_id: int) -> Medico | None:
        with self._operazione("trova_medico") as a:
            return a.trova_medico(medico_id)

    def dettaglio(self, appuntamento_id: int) -> Appuntamento | None:
        with self._operazione("dettaglio") as a:
            return a.trova_appuntamento(appuntamento_id)

    def lista_attivi(self) -> list[Appuntamento]:
        """Appuntamenti attivi per (livello priorità, richiesto_il): la coda di priorità."""
        with self._operazione("lista_attivi") as a:
            return a.lista_attivi_ordinati()

    # =========================
    # Prenotazione (use case core)
    # =========================
    def prenota(
        self,
        medico_id: int,
        nome_paziente: str,
        giorno: date,
        testo_fascia: str,
        priorita: Priorita,
    ) -> Esito:
        """
        Use case: Prenotare appuntamento.
        - validazioni in ordine: medico, paziente, formato fascia, data, orario medico
        - slot occupato da priorità meno urgente: l'occupante viene annullato
        - slot occupato da priorità uguale o più urgente: rifiuto
        - slot libero: vale il limite giornaliero per medico
        Ogni rifiuto lascia il DB invariato.
        """
        with self._operazione("prenota") as a:
            medico = a.trova_medico(medico_id)
            if medico is None:
                return Esito.fallito(CodiceErrore.MEDICO_INESISTENTE, f"Medico {medico_id} non trovato.")

            nome = (nome_paziente or "").strip()
            if not nome:
                return Esito.fallito(CodiceErrore.PAZIENTE_NON_VALIDO, "Il nome del paziente non può essere vuoto.")

            try:
                fascia = parse_fascia(testo_fascia)
            except FormatoSlotNonValido as e:
                return Esito.fallito(CodiceErrore.FORMATO_SLOT_NON_VALIDO, str(e))

            if giorno < self.orologio.oggi():
                return Esito.fallito(CodiceErrore.DATA_PASSATA, "Non si può prenotare in una data passata.")

            if not entro_orario_lavoro(fascia, medico):
                return Esito.fallito(
                    CodiceErrore.FUORI_ORARIO,
                    f"La fascia {fascia} è fuori dall'orario di {medico.nome} ({medico.orario}).",
                )

            paziente = a.trova_paziente_per_nome(nome) or a.crea_paziente(nome)

            conteggio = a.conta_appuntamenti_attivi(medico.id, giorno)
            conflitto = a.trova_appuntamento_attivo(medico.id, giorno, fascia)

            sostituito_id = None
            if conflitto is not None:
                if not priorita.precede(conflitto.priorita):
                    a.annulla_modifiche()
                    return Esito.fallito(CodiceErrore.SLOT_GIA_PRENOTATO, "Slot già prenotato.")
                sostituito_id = self._annulla_per_precedenza(a, conflitto, priorita)
            elif conteggio >= self.impostazioni.limite_giornaliero:
                # limite controllato solo quando lo slot è libero
                a.annulla_modifiche()
                return Esito.fallito(
                    CodiceErrore.LIMITE_GIORNALIERO_SUPERATO,
                    f"Limite appuntamenti superato (max {self.impostazioni.limite_giornaliero} al giorno).",
                )

            app = a.salva_appuntamento(
                Appuntamento(
                    medico_id=medico.id,
                    paziente_id=paziente.id,
                    nome_paziente=nome,
                    data=giorno,
                    slot_inizio=fascia.inizio,
                    slot_fine=fascia.fine,
                    priorita=priorita,
                    richiesto_il=self.orologio.adesso(),
                    stato=StatoAppuntamento.ATTIVO,
                )
            )

            logger.info(
                "Prenotato appuntamento %s: %s con %s il %s %s (%s)",
                app.id, nome, medico.nome, giorno.isoformat(), fascia, priorita.name,
            )
            return Esito(True, app.id, None, "Appuntamento prenotato.", sostituito_id)

    def annulla(self, appuntamento_id: int) -> bool:
        """True se un appuntamento attivo è stato annullato; False se assente o già annullato."""
        with self._operazione("annulla") as a:
            app = a.trova_appuntamento(appuntamento_id)
            if not app or app.stato != StatoAppuntamento.ATTIVO:
                return False

            app.stato = StatoAppuntamento.ANNULLATO
            a.salva_appuntamento(app)
            logger.info("Annullato appuntamento %s", appuntamento_id)
            return True

    def sposta(self, appuntamento_id: int, nuovo_giorno: date, testo_fascia: str) -> Esito:
        """
        Use case: Spostare appuntamento.
        Stessa regola di precedenza di `prenota`, con la priorità dell'appuntamento spostato.
        Se lo spostamento è rifiutato l'appuntamento resta com'era.
        """
        with self._operazione("sposta") as a:
            try:
                fascia = parse_fascia(testo_fascia)
            except FormatoSlotNonValido as e:
                return Esito.fallito(CodiceErrore.FORMATO_SLOT_NON_VALIDO, str(e), appuntamento_id)

            if nuovo_giorno < self.orologio.oggi():
                return Esito.fallito(
                    CodiceErrore.DATA_PASSATA, "Non si può spostare in una data passata.", appuntamento_id
                )

            app = a.trova_appuntamento(appuntamento_id)
            if app is None or app.stato != StatoAppuntamento.ATTIVO:
                return Esito.fallito(
                    CodiceErrore.NON_TROVATO, f"Nessun appuntamento attivo con ID {appuntamento_id}.", appuntamento_id
                )

            medico = app.medico
            if not entro_orario_lavoro(fascia, medico):
                return Esito.fallito(
                    CodiceErrore.FUORI_ORARIO,
                    f"La fascia {fascia} è fuori dall'orario di {medico.nome} ({medico.orario}).",
                    appuntamento_id,
                )

            conflitto = a.trova_appuntamento_attivo(medico.id, nuovo_giorno, fascia, escludi_id=app.id)

            sostituito_id = None
            if conflitto is not None:
                if not app.priorita.precede(conflitto.priorita):
                    return Esito.fallito(
                        CodiceErrore.SLOT_GIA_PRENOTATO,
                        "Lo slot richiesto è già occupato da un appuntamento con priorità uguale o superiore.",
                        appuntamento_id,
                    )
                sostituito_id = self._annulla_per_precedenza(a, conflitto, app.priorita)

            app.data = nuovo_giorno
            app.slot_inizio = fascia.inizio
            app.slot_fine = fascia.fine
            app.stato = StatoAppuntamento.ATTIVO
            # nuovo timestamp: conta per l'ordine a parità di priorità
            app.richiesto_il = self.orologio.adesso()
            a.salva_appuntamento(app)

            logger.info("Spostato appuntamento %s al %s %s", app.id, nuovo_giorno.isoformat(), fascia)
            return Esito(True, app.id, None, "Appuntamento spostato.", sostituito_id)

    def _annulla_per_precedenza(self, a: ArchivioAppuntamenti, occupante: Appuntamento, priorita: Priorita) -> int:
        occupante.stato = StatoAppuntamento.ANNULLATO
        a.salva_appuntamento(occupante)
        logger.info(
            "Priorità %s sostituisce l'appuntamento %s (%s)", priorita.name, occupante.id, occupante.priorita.name
        )
        return occupante.id
