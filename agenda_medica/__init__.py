"""
Agenda medica con prenotazioni a priorità.

Struttura:
- config.py      : impostazioni da .env / variabili d'ambiente
- db.py          : engine e sessioni SQLAlchemy
- models.py      : modelli ORM, stati e priorità
- slot.py        : parsing fasce orarie e controllo orario medico
- orologio.py    : data/ora corrente (sostituibile nei test)
- archivio.py    : query usate dal motore, dentro una transazione
- concorrenza.py : lock FIFO del motore
- motore.py      : logica di dominio (prenota, annulla, sposta, coda a priorità)
- seed.py        : tabelle e medici iniziali
- simulazione.py : prenotazioni concorrenti sullo stesso slot
- cli.py         : console (sottocomandi e menu 1-6)
- api_main.py    : API HTTP (FastAPI)
"""
