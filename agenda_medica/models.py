from __future__ import annotations

import enum
from datetime import date, datetime, time

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from .db import Base


class StatoAppuntamento(enum.Enum):
    ATTIVO = "ATTIVO"
    ANNULLATO = "ANNULLATO"


class Priorita(enum.Enum):
    """
    Livello di urgenza: numero più basso = più urgente.
    L'ordinamento usa sempre `livello`, mai l'ordine di dichiarazione.
    """
    EMERGENZA = 1
    VIP = 2
    REGOLARE = 3

    @property
    def livello(self) -> int:
        return self.value

    def precede(self, altra: "Priorita") -> bool:
        """True se questa priorità è strettamente più urgente di `altra`."""
        return self.livello < altra.livello

    @classmethod
    def da_livello(cls, livello: int) -> "Priorita":
        for p in cls:
            if p.livello == livello:
                return p
        raise ValueError(f"Livello di priorità sconosciuto: {livello}")

    @classmethod
    def da_testo(cls, testo: str) -> "Priorita":
        """Accetta i nomi (case-insensitive) e gli alias inglesi della console."""
        chiave = (testo or "").strip().upper()
        try:
            return cls[_ALIAS_PRIORITA.get(chiave, chiave)]
        except KeyError:
            raise ValueError(f"Priorità non valida: {testo!r} (usa emergency | vip | regular)") from None


_ALIAS_PRIORITA = {"EMERGENCY": "EMERGENZA", "REGULAR": "REGOLARE"}


class LivelloPriorita(TypeDecorator):
    """Salva `Priorita` come intero (livello) così ORDER BY rispetta l'urgenza."""
    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return value.livello

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Priorita.da_livello(value)


class Medico(Base):
    __tablename__ = "medici"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nome: Mapped[str] = mapped_column(String(80), nullable=False)
    specializzazione: Mapped[str] = mapped_column(String(120), nullable=False)
    # orario di lavoro [ora_inizio, ora_fine)
    ora_inizio: Mapped[time] = mapped_column(Time, nullable=False)
    ora_fine: Mapped[time] = mapped_column(Time, nullable=False)

    appuntamenti: Mapped[list["Appuntamento"]] = relationship(back_populates="medico")

    @property
    def orario(self) -> str:
        return f"{self.ora_inizio.strftime('%H:%M')}-{self.ora_fine.strftime('%H:%M')}"

    def __repr__(self) -> str:
        return f"Medico({self.nome}, {self.specializzazione})"


class Paziente(Base):
    __tablename__ = "pazienti"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nome: Mapped[str] = mapped_column(String(120), nullable=False, index=True)

    appuntamenti: Mapped[list["Appuntamento"]] = relationship(back_populates="paziente")

    def __repr__(self) -> str:
        return f"Paziente({self.nome})"


class Appuntamento(Base):
    __tablename__ = "appuntamenti"
    __table_args__ = (
        # Nessun vincolo UNIQUE sullo slot: una prenotazione più urgente può sostituirne
        # una attiva, l'unicità dell'attivo la garantisce il motore.
        Index("ix_app_medico_data_stato", "medico_id", "data", "stato"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    medico_id: Mapped[int] = mapped_column(ForeignKey("medici.id"), nullable=False)
    paziente_id: Mapped[int] = mapped_column(ForeignKey("pazienti.id"), nullable=False)

    # nome del paziente al momento della prenotazione (copia voluta)
    nome_paziente: Mapped[str] = mapped_column(String(120), nullable=False)

    data: Mapped[date] = mapped_column(Date, nullable=False)
    slot_inizio: Mapped[time] = mapped_column(Time, nullable=False)
    slot_fine: Mapped[time] = mapped_column(Time, nullable=False)

    priorita: Mapped[Priorita] = mapped_column(LivelloPriorita(), nullable=False)
    richiesto_il: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    stato: Mapped[StatoAppuntamento] = mapped_column(
        Enum(StatoAppuntamento), default=StatoAppuntamento.ATTIVO, nullable=False
    )

    medico: Mapped["Medico"] = relationship(back_populates="appuntamenti")
    paziente: Mapped["Paziente"] = relationship(back_populates="appuntamenti")

    @property
    def attivo(self) -> bool:
        return self.stato == StatoAppuntamento.ATTIVO

    @property
    def fascia(self) -> str:
        return f"{self.slot_inizio.hour}:{self.slot_inizio.minute:02d}-{self.slot_fine.hour}:{self.slot_fine.minute:02d}"

    def __repr__(self) -> str:
        return f"Appuntamento({self.id}, {self.nome_paziente}, {self.data} {self.fascia}, {self.priorita.name}, {self.stato.value})"
