from __future__ import annotations

import argparse
import logging
from datetime import date
from typing import Callable

from agenda_medica.config import Impostazioni, carica_impostazioni
from agenda_medica.db import get_engine, get_session_factory
from agenda_medica.errori import ErroreArchivio, Esito, MotoreOccupato
from agenda_medica.models import Priorita
from agenda_medica.motore import MotorePrenotazioni
from agenda_medica.seed import init_db, seed_base
from agenda_medica.simulazione import simula_prenotazioni_concorrenti


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def crea_motore(impostazioni: Impostazioni | None = None) -> MotorePrenotazioni:
    return MotorePrenotazioni(get_session_factory(), impostazioni or carica_impostazioni())


def _stampa_esito(esito: Esito) -> None:
    if esito.ok:
        print(esito.messaggio)
        print(f"ID appuntamento: {esito.appuntamento_id}")
        if esito.sostituito_id is not None:
            print(f"Sostituito per priorità l'appuntamento ID {esito.sostituito_id}")
    else:
        print(f"Errore : {esito.messaggio}")


def stampa_medici(motore: MotorePrenotazioni) -> None:
    for m in motore.lista_medici():
        print(f"{m.id}. {m.nome} ({m.specializzazione}) [{m.orario}]")


def stampa_attivi(motore: MotorePrenotazioni) -> None:
    attivi = motore.lista_attivi()
    if not attivi:
        print("Nessun appuntamento!")
        return

    print("-------------Appuntamenti attivi-----------------")
    print("ID | Paziente | Medico | Fascia | Data | Priorità")
    for a in attivi:
        print(f"{a.id} | {a.nome_paziente} | {a.medico.nome} | {a.fascia} | {a.data.isoformat()} | {a.priorita.name}")


def cmd_init(args: argparse.Namespace, motore: MotorePrenotazioni) -> None:
    n = len(motore.lista_medici())
    print(f"DB inizializzato, medici presenti: {n}.")


def cmd_medici(args: argparse.Namespace, motore: MotorePrenotazioni) -> None:
    stampa_medici(motore)


def cmd_prenota(args: argparse.Namespace, motore: MotorePrenotazioni) -> None:
    esito = motore.prenota(
        medico_id=args.medico_id,
        nome_paziente=args.paziente,
        giorno=args.data,
        testo_fascia=args.fascia,
        priorita=args.priorita,
    )
    _stampa_esito(esito)


def cmd_annulla(args: argparse.Namespace, motore: MotorePrenotazioni) -> None:
    ok = motore.annulla(args.appuntamento_id)
    print("Appuntamento annullato." if ok else "Nessun appuntamento attivo con questo ID.")


def cmd_lista(args: argparse.Namespace, motore: MotorePrenotazioni) -> None:
    stampa_attivi(motore)


def cmd_sposta(args: argparse.Namespace, motore: MotorePrenotazioni) -> None:
    esito = motore.sposta(args.appuntamento_id, args.data, args.fascia)
    _stampa_esito(esito)


def cmd_simula(args: argparse.Namespace, motore: MotorePrenotazioni) -> None:
    print("Simulazione prenotazioni concorrenti...")
    risultato = simula_prenotazioni_concorrenti(motore, ritardo=args.ritardo)
    if risultato is None:
        print("Nessun medico disponibile per la simulazione!")
        return
    for nome, esito in risultato.esiti:
        print(f"{nome}: {esito.messaggio}")
    stampa_attivi(motore)


# =========================
# Menu interattivo 1-6
# =========================
MENU = """Benvenuto in Agenda Medica
Menu:
1. Prenota appuntamento
2. Annulla appuntamento
3. Visualizza appuntamenti
4. Sposta appuntamento
5. Simula prenotazioni concorrenti
6. Esci
-----------------------------------"""


def _leggi_intero(leggi: Callable[[str], str], prompt: str) -> int | None:
    try:
        return int(leggi(prompt).strip())
    except ValueError:
        return None


def _menu_prenota(motore: MotorePrenotazioni, leggi: Callable[[str], str]) -> None:
    print("\nMedici disponibili:")
    stampa_medici(motore)

    medico_id = _leggi_intero(leggi, "Scegli ID medico: ")
    if medico_id is None:
        print("ID non valido!")
        return
    medico = motore.trova_medico(medico_id)
    if medico is None:
        print("Medico non trovato!")
        return
    print(f"Prenotazione per: {medico.nome} ({medico.specializzazione})")

    nome = leggi("Nome paziente: ")
    fascia = leggi("Fascia oraria (es. 10:00-10:30): ")
    testo_data = leggi("Data appuntamento (yyyy-MM-dd): ")
    testo_priorita = leggi("Priorità (Emergency | VIP | Regular): ")

    try:
        giorno = date.fromisoformat(testo_data.strip())
    except ValueError:
        print("Errore: formato data non valido. Usa yyyy-MM-dd.")
        return
    try:
        priorita = Priorita.da_testo(testo_priorita)
    except ValueError:
        print("Errore: priorità non valida.")
        return

    _stampa_esito(motore.prenota(medico.id, nome, giorno, fascia, priorita))


def _menu_sposta(motore: MotorePrenotazioni, leggi: Callable[[str], str]) -> None:
    app_id = _leggi_intero(leggi, "ID appuntamento da spostare : ")
    if app_id is None:
        print("Formato ID non valido!")
        return
    testo_data = leggi("Nuova data (yyyy-MM-dd): ")
    fascia = leggi("Nuova fascia oraria (es. 10:00-10:30): ")
    try:
        giorno = date.fromisoformat(testo_data.strip())
    except ValueError:
        print("Errore: formato data non valido. Usa yyyy-MM-dd.")
        return
    _stampa_esito(motore.sposta(app_id, giorno, fascia))


def esegui_menu(motore: MotorePrenotazioni, leggi: Callable[[str], str] = input) -> int:
    """Loop della console; ritorna il codice di uscita (0 su Esci o fine input)."""
    while True:
        print(MENU)
        try:
            scelta = _leggi_intero(leggi, "Scelta : ")
            if scelta is None:
                print("Input non valido!")
            elif scelta == 1:
                _menu_prenota(motore, leggi)
            elif scelta == 2:
                app_id = _leggi_intero(leggi, "ID appuntamento da annullare : ")
                if app_id is None:
                    print("Formato ID non valido!")
                elif motore.annulla(app_id):
                    print("Appuntamento annullato!")
                else:
                    print("Nessun appuntamento attivo con questo ID!")
            elif scelta == 3:
                stampa_attivi(motore)
            elif scelta == 4:
                _menu_sposta(motore, leggi)
            elif scelta == 5:
                print("Simulazione prenotazioni concorrenti...")
                if simula_prenotazioni_concorrenti(motore) is None:
                    print("Nessun medico disponibile per la simulazione!")
                stampa_attivi(motore)
            elif scelta == 6:
                return 0
            else:
                print("Opzione non valida!")
        except EOFError:
            return 0
        except (ErroreArchivio, MotoreOccupato) as e:
            print(f"Errore : {e}")


def cmd_menu(args: argparse.Namespace, motore: MotorePrenotazioni) -> None:
    esegui_menu(motore)


# =========================
# Parser
# =========================
def _data(testo: str) -> date:
    try:
        return date.fromisoformat(testo)
    except ValueError:
        raise argparse.ArgumentTypeError(f"data non valida: {testo!r} (usa YYYY-MM-DD)") from None


def _priorita(testo: str) -> Priorita:
    try:
        return Priorita.da_testo(testo)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="agenda-medica", description="Agenda medica con prenotazioni a priorità")
    sub = p.add_subparsers(required=True)

    p_init = sub.add_parser("init", help="Crea DB e carica i medici")
    p_init.set_defaults(func=cmd_init)

    p_med = sub.add_parser("medici", help="Lista medici")
    p_med.set_defaults(func=cmd_medici)

    p_book = sub.add_parser("prenota", help="Prenota appuntamento")
    p_book.add_argument("--medico-id", type=int, required=True)
    p_book.add_argument("--paziente", required=True)
    p_book.add_argument("--data", type=_data, required=True, help="YYYY-MM-DD")
    p_book.add_argument("--fascia", required=True, help="H:MM-H:MM es: 10:00-10:30")
    p_book.add_argument("--priorita", type=_priorita, default=Priorita.REGOLARE, help="emergency | vip | regular")
    p_book.set_defaults(func=cmd_prenota)

    p_cancel = sub.add_parser("annulla", help="Annulla appuntamento")
    p_cancel.add_argument("--appuntamento-id", type=int, required=True)
    p_cancel.set_defaults(func=cmd_annulla)

    p_list = sub.add_parser("lista", help="Appuntamenti attivi in ordine di priorità")
    p_list.set_defaults(func=cmd_lista)

    p_move = sub.add_parser("sposta", help="Sposta appuntamento")
    p_move.add_argument("--appuntamento-id", type=int, required=True)
    p_move.add_argument("--data", type=_data, required=True, help="YYYY-MM-DD")
    p_move.add_argument("--fascia", required=True, help="H:MM-H:MM")
    p_move.set_defaults(func=cmd_sposta)

    p_sim = sub.add_parser("simula", help="Simula prenotazioni concorrenti sullo stesso slot")
    p_sim.add_argument("--ritardo", type=float, default=0.1, help="Secondi tra una richiesta e la successiva")
    p_sim.set_defaults(func=cmd_simula)

    p_menu = sub.add_parser("menu", help="Console interattiva (1-6)")
    p_menu.set_defaults(func=cmd_menu)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        impostazioni = carica_impostazioni()
    except RuntimeError as e:
        print(f"Errore di configurazione: {e}")
        return 2
    _setup_logging(impostazioni.log_level)

    motore = crea_motore(impostazioni)
    try:
        init_db(get_engine())  # garantisce tabelle
        seed_base()  # medici di base (idempotente)
        args.func(args, motore)
    except (ErroreArchivio, MotoreOccupato) as e:
        print(f"Errore : {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
