from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from agenda_medica.api_main import app, get_motore
from agenda_medica.errori import ErroreArchivio
from agenda_medica.tests.conftest import SMITH


@pytest.fixture
def client(motore):
    # niente `with`: lo startup userebbe il DB di default
    app.dependency_overrides[get_motore] = lambda: motore
    yield TestClient(app)
    app.dependency_overrides.clear()


def _prenota(client, domani, nome: str, fascia: str = "10:00-10:30", priorita: str = "regular") -> dict:
    r = client.post(
        "/api/appuntamenti",
        json={"medico_id": SMITH, "nome_paziente": nome, "data": domani.isoformat(), "fascia": fascia, "priorita": priorita},
    )
    assert r.status_code == 200
    return r.json()


def test_lista_medici(client) -> None:
    r = client.get("/api/medici")
    assert r.status_code == 200
    assert [m["nome"] for m in r.json()] == ["Dr. Smith", "Dr. Jones", "Dr. Taylor"]
    assert r.json()[0]["orario"] == "09:00-17:00"


def test_prenota_e_sostituzione(client, domani) -> None:
    primo = _prenota(client, domani, "Anna", priorita="regular")
    secondo = _prenota(client, domani, "Bruno", priorita="Emergency")

    assert primo["ok"] and secondo["ok"]
    assert secondo["sostituito_id"] == primo["appuntamento_id"]

    attivi = client.get("/api/appuntamenti").json()
    assert [(a["nome_paziente"], a["priorita"]) for a in attivi] == [("Bruno", "EMERGENZA")]


def test_prenota_rifiutata_ritorna_codice(client, domani) -> None:
    _prenota(client, domani, "Anna", priorita="vip")
    esito = _prenota(client, domani, "Bruno", priorita="vip")

    assert esito["ok"] is False
    assert esito["errore"] == "SLOT_GIA_PRENOTATO"
    assert esito["appuntamento_id"] is None


def test_nome_paziente_vuoto_ritorna_codice(client, domani) -> None:
    esito = _prenota(client, domani, "")

    assert esito["ok"] is False
    assert esito["errore"] == "PAZIENTE_NON_VALIDO"


def test_medico_inesistente_prevale_sul_nome_vuoto(client, domani) -> None:
    r = client.post(
        "/api/appuntamenti",
        json={"medico_id": 999, "nome_paziente": "", "data": domani.isoformat(), "fascia": "10:00-10:30"},
    )

    assert r.status_code == 200
    assert r.json()["errore"] == "MEDICO_INESISTENTE"


def test_priorita_non_valida(client, domani) -> None:
    r = client.post(
        "/api/appuntamenti",
        json={"medico_id": SMITH, "nome_paziente": "Anna", "data": domani.isoformat(), "fascia": "10:00-10:30", "priorita": "urgentissimo"},
    )
    assert r.status_code == 422


def test_dettaglio_e_404(client, domani) -> None:
    esito = _prenota(client, domani, "Anna")

    r = client.get(f"/api/appuntamenti/{esito['appuntamento_id']}")
    assert r.status_code == 200
    assert r.json()["stato"] == "ATTIVO"
    assert r.json()["fascia"] == "10:00-10:30"

    assert client.get("/api/appuntamenti/999").status_code == 404


def test_annulla(client, domani) -> None:
    esito = _prenota(client, domani, "Anna")
    url = f"/api/appuntamenti/{esito['appuntamento_id']}/annulla"

    assert client.post(url).json()["ok"] is True
    assert client.post(url).json()["ok"] is False
    assert client.get("/api/appuntamenti").json() == []


def test_sposta(client, domani) -> None:
    esito = _prenota(client, domani, "Anna")

    r = client.post(
        f"/api/appuntamenti/{esito['appuntamento_id']}/sposta",
        json={"data": domani.isoformat(), "fascia": "7:00-7:30"},
    )
    assert r.json()["errore"] == "FUORI_ORARIO"

    r = client.post(
        f"/api/appuntamenti/{esito['appuntamento_id']}/sposta",
        json={"data": domani.isoformat(), "fascia": "15:00-15:30"},
    )
    assert r.json()["ok"] is True
    assert client.get(f"/api/appuntamenti/{esito['appuntamento_id']}").json()["fascia"] == "15:00-15:30"


def test_errore_archivio_diventa_503(client, motore) -> None:
    with patch.object(motore, "lista_attivi", side_effect=ErroreArchivio("db giù")):
        r = client.get("/api/appuntamenti")
    assert r.status_code == 503
