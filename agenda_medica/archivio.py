from __future__ import annotations

from datetime import date

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session, joinedload

from .models import Appuntamento, Medico, Paziente, StatoAppuntamento
from .slot import FasciaOraria


class ArchivioAppuntamenti:
    """
    Accesso ai dati usato dal motore. Lavora su una sola Session:
    tutte le chiamate di un'operazione stanno nella stessa transazione.
    """

    def __init__(self, session: Session) -> None:
        self.s = session

    # =========================
    # Medici
    # =========================
    def trova_medico(self, medico_id: int) -> Medico | None:
        return self.s.get(Medico, medico_id)

    def lista_medici(self) -> list[Medico]:
        return list(self.s.scalars(select(Medico).order_by(Medico.id)))

    # =========================
    # Pazienti
    # =========================
    def trova_paziente_per_nome(self, nome: str) -> Paziente | None:
        q = select(Paziente).where(Paziente.nome == nome).order_by(Paziente.id).limit(1)
        return self.s.scalars(q).first()

    def crea_paziente(self, nome: str) -> Paziente:
        p = Paziente(nome=nome)
        self.s.add(p)
        self.s.flush()
        return p

    # =========================
    # Appuntamenti
    # =========================
    def conta_appuntamenti_attivi(self, medico_id: int, giorno: date) -> int:
        q = select(func.count(Appuntamento.id)).where(
            and_(
                Appuntamento.medico_id == medico_id,
                Appuntamento.data == giorno,
                Appuntamento.stato == StatoAppuntamento.ATTIVO,
            )
        )
        return self.s.scalar(q) or 0

    def trova_appuntamento_attivo(
        self,
        medico_id: int,
        giorno: date,
        fascia: FasciaOraria,
        escludi_id: int | None = None,
    ) -> Appuntamento | None:
        condizioni = [
            Appuntamento.medico_id == medico_id,
            Appuntamento.data == giorno,
            Appuntamento.slot_inizio == fascia.inizio,
            Appuntamento.slot_fine == fascia.fine,
            Appuntamento.stato == StatoAppuntamento.ATTIVO,
        ]
        if escludi_id is not None:
            condizioni.append(Appuntamento.id != escludi_id)

        q = select(Appuntamento).where(and_(*condizioni)).order_by(Appuntamento.id).limit(1)
        return self.s.scalars(q).first()

    def trova_appuntamento(self, appuntamento_id: int) -> Appuntamento | None:
        return self.s.get(Appuntamento, appuntamento_id, options=[joinedload(Appuntamento.medico)])

    def salva_appuntamento(self, app: Appuntamento) -> Appuntamento:
        """Inserisce o aggiorna; dopo il flush un nuovo appuntamento ha il suo id."""
        self.s.add(app)
        self.s.flush()
        return app

    def lista_attivi_ordinati(self) -> list[Appuntamento]:
        q = (
            select(Appuntamento)
            .options(joinedload(Appuntamento.medico))
            .where(Appuntamento.stato == StatoAppuntamento.ATTIVO)
            .order_by(Appuntamento.priorita.asc(), Appuntamento.richiesto_il.asc(), Appuntamento.id.asc())
        )
        return list(self.s.scalars(q))

    def annulla_modifiche(self) -> None:
        self.s.rollback()
