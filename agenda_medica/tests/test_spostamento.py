from __future__ import annotations

from datetime import time, timedelta

from agenda_medica.errori import CodiceErrore
from agenda_medica.models import Priorita, StatoAppuntamento
from agenda_medica.tests.conftest import JONES, SMITH


def _stato(motore, app_id: int) -> tuple:
    a = motore.dettaglio(app_id)
    return (a.data, a.slot_inizio, a.slot_fine, a.stato, a.priorita, a.richiesto_il)


def test_sposta_su_slot_libero(motore, domani) -> None:
    esito = motore.prenota(SMITH, "Anna", domani, "10:00-10:30", Priorita.REGOLARE)
    prima = motore.dettaglio(esito.appuntamento_id)

    nuovo_giorno = domani + timedelta(days=2)
    spostato = motore.sposta(esito.appuntamento_id, nuovo_giorno, "14:00-14:45")

    assert spostato.ok
    assert spostato.appuntamento_id == esito.appuntamento_id
    assert spostato.sostituito_id is None

    dopo = motore.dettaglio(esito.appuntamento_id)
    assert dopo.data == nuovo_giorno
    assert (dopo.slot_inizio, dopo.slot_fine) == (time(14, 0), time(14, 45))
    assert dopo.stato == StatoAppuntamento.ATTIVO
    assert dopo.richiesto_il > prima.richiesto_il


def test_sposta_sostituisce_priorita_inferiore(motore, domani) -> None:
    a = motore.prenota(SMITH, "Anna", domani, "10:00-10:30", Priorita.VIP)
    b = motore.prenota(SMITH, "Bruno", domani, "11:00-11:30", Priorita.REGOLARE)

    esito = motore.sposta(a.appuntamento_id, domani, "11:00-11:30")

    assert esito.ok
    assert esito.appuntamento_id == a.appuntamento_id
    assert esito.sostituito_id == b.appuntamento_id
    assert motore.dettaglio(b.appuntamento_id).stato == StatoAppuntamento.ANNULLATO

    spostato = motore.dettaglio(a.appuntamento_id)
    assert spostato.slot_inizio == time(11, 0)
    assert spostato.stato == StatoAppuntamento.ATTIVO


def test_sposta_rifiutato_da_priorita_superiore_lascia_tutto_invariato(motore, domani) -> None:
    a = motore.prenota(SMITH, "Anna", domani, "10:00-10:30", Priorita.REGOLARE)
    b = motore.prenota(SMITH, "Bruno", domani, "11:00-11:30", Priorita.VIP)
    prima_a, prima_b = _stato(motore, a.appuntamento_id), _stato(motore, b.appuntamento_id)

    esito = motore.sposta(a.appuntamento_id, domani, "11:00-11:30")

    assert not esito.ok
    assert esito.errore == CodiceErrore.SLOT_GIA_PRENOTATO
    assert _stato(motore, a.appuntamento_id) == prima_a
    assert _stato(motore, b.appuntamento_id) == prima_b


def test_sposta_rifiutato_a_parita_di_priorita(motore, domani) -> None:
    a = motore.prenota(SMITH, "Anna", domani, "10:00-10:30", Priorita.VIP)
    motore.prenota(SMITH, "Bruno", domani, "11:00-11:30", Priorita.VIP)
    prima = _stato(motore, a.appuntamento_id)

    esito = motore.sposta(a.appuntamento_id, domani, "11:00-11:30")

    assert esito.errore == CodiceErrore.SLOT_GIA_PRENOTATO
    assert _stato(motore, a.appuntamento_id) == prima


def test_sposta_sullo_stesso_slot_non_e_conflitto(motore, domani) -> None:
    a = motore.prenota(SMITH, "Anna", domani, "10:00-10:30", Priorita.REGOLARE)
    assert motore.sposta(a.appuntamento_id, domani, "10:00-10:30").ok


def test_sposta_inesistente(motore, domani) -> None:
    esito = motore.sposta(12345, domani, "10:00-10:30")
    assert esito.errore == CodiceErrore.NON_TROVATO
    assert esito.appuntamento_id == 12345


def test_sposta_annullato_non_lo_riattiva(motore, domani) -> None:
    a = motore.prenota(SMITH, "Anna", domani, "10:00-10:30", Priorita.REGOLARE)
    motore.annulla(a.appuntamento_id)

    esito = motore.sposta(a.appuntamento_id, domani, "12:00-12:30")

    assert esito.errore == CodiceErrore.NON_TROVATO
    assert motore.dettaglio(a.appuntamento_id).stato == StatoAppuntamento.ANNULLATO


def test_sposta_formato_controllato_prima_della_ricerca(motore, domani) -> None:
    assert motore.sposta(12345, domani, "dieci").errore == CodiceErrore.FORMATO_SLOT_NON_VALIDO


def test_sposta_data_passata(motore, oggi) -> None:
    a = motore.prenota(SMITH, "Anna", oggi, "10:00-10:30", Priorita.REGOLARE)
    esito = motore.sposta(a.appuntamento_id, oggi - timedelta(days=1), "10:00-10:30")
    assert esito.errore == CodiceErrore.DATA_PASSATA


def test_sposta_usa_orario_del_proprio_medico(motore, domani) -> None:
    # 9:00 va bene per Smith ma non per Jones (10:00-18:00)
    a = motore.prenota(JONES, "Anna", domani, "10:00-10:30", Priorita.REGOLARE)
    prima = _stato(motore, a.appuntamento_id)

    esito = motore.sposta(a.appuntamento_id, domani, "9:00-9:30")

    assert esito.errore == CodiceErrore.FUORI_ORARIO
    assert _stato(motore, a.appuntamento_id) == prima


def test_sposta_non_applica_limite_giornaliero(motore, domani) -> None:
    fasce = ["9:00-9:30", "9:30-10:00", "10:00-10:30", "10:30-11:00", "11:00-11:30"]
    for i, f in enumerate(fasce):
        motore.prenota(SMITH, f"P{i}", domani, f, Priorita.REGOLARE)
    altro = motore.prenota(SMITH, "Altro", domani + timedelta(days=1), "9:00-9:30", Priorita.REGOLARE)

    assert motore.sposta(altro.appuntamento_id, domani, "15:00-15:30").ok
