from __future__ import annotations

from datetime import date
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from agenda_medica.config import carica_impostazioni
from agenda_medica.db import get_session_factory
from agenda_medica.errori import ErroreArchivio, MotoreOccupato
from agenda_medica.models import Appuntamento, Priorita
from agenda_medica.motore import MotorePrenotazioni
from agenda_medica.seed import init_db, seed_base

app = FastAPI(title="Agenda Medica API", version="1.0.0")


@lru_cache(maxsize=1)
def get_motore() -> MotorePrenotazioni:
    # un solo motore (e quindi un solo lock) per processo
    return MotorePrenotazioni(get_session_factory(), carica_impostazioni())



# Startup

@app.on_event("startup")
def startup() -> None:
    # Crea tabelle e seed base (idempotente)
    init_db()
    seed_base()



# Schemi

class PrenotazioneIn(BaseModel):
    medico_id: int
    nome_paziente: str
    data: date
    fascia: str = Field(..., examples=["10:00-10:30"])
    priorita: Priorita = Priorita.REGOLARE

    @field_validator("priorita", mode="before")
    @classmethod
    def _priorita_da_testo(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Priorita.da_testo(v)
        return v


class SpostamentoIn(BaseModel):
    data: date
    fascia: str = Field(..., examples=["11:00-11:30"])



def _flat(a: Appuntamento) -> dict[str, Any]:
    return {
        "id": a.id,
        "medico_id": a.medico_id,
        "medico": a.medico.nome,
        "nome_paziente": a.nome_paziente,
        "data": a.data.isoformat(),
        "fascia": a.fascia,
        "priorita": a.priorita.name,
        "richiesto_il": a.richiesto_il.isoformat(),
        "stato": a.stato.value,
    }


def _esegui(fn, *args) -> Any:
    try:
        return fn(*args)
    except (ErroreArchivio, MotoreOccupato) as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


# Endpoints

@app.get("/api/medici")
def api_medici(motore: MotorePrenotazioni = Depends(get_motore)) -> list[dict]:
    return [
        {"id": m.id, "nome": m.nome, "specializzazione": m.specializzazione, "orario": m.orario}
        for m in _esegui(motore.lista_medici)
    ]


@app.get("/api/appuntamenti")
def api_appuntamenti_attivi(motore: MotorePrenotazioni = Depends(get_motore)) -> list[dict]:
    """Appuntamenti attivi in ordine di priorità, a parità per ora di richiesta."""
    return [_flat(a) for a in _esegui(motore.lista_attivi)]


@app.get("/api/appuntamenti/{appuntamento_id}")
def api_appuntamento(appuntamento_id: int, motore: MotorePrenotazioni = Depends(get_motore)) -> dict[str, Any]:
    a = _esegui(motore.dettaglio, appuntamento_id)
    if a is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appuntamento non trovato")
    return _flat(a)


@app.post("/api/appuntamenti")
def api_prenota(payload: PrenotazioneIn, motore: MotorePrenotazioni = Depends(get_motore)) -> dict[str, Any]:
    esito = _esegui(
        motore.prenota, payload.medico_id, payload.nome_paziente, payload.data, payload.fascia, payload.priorita
    )
    return esito.as_dict()


@app.post("/api/appuntamenti/{appuntamento_id}/annulla")
def api_annulla(appuntamento_id: int, motore: MotorePrenotazioni = Depends(get_motore)) -> dict[str, Any]:
    ok = _esegui(motore.annulla, appuntamento_id)
    return {
        "ok": ok,
        "messaggio": "Appuntamento annullato." if ok else "Nessun appuntamento attivo con questo ID.",
    }


@app.post("/api/appuntamenti/{appuntamento_id}/sposta")
def api_sposta(
    appuntamento_id: int, payload: SpostamentoIn, motore: MotorePrenotazioni = Depends(get_motore)
) -> dict[str, Any]:
    return _esegui(motore.sposta, appuntamento_id, payload.data, payload.fascia).as_dict()
