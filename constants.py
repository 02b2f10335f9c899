#! /usr/bin/python3
# -*- coding: utf8 -*-
"""
Enthält die festen (nicht konfigurierbaren) Konstanten der Steuerung.
"""
# ------------------------------------------------------------------------
import logging
# ------------------------------------------------------------------------
#: Verzeichnis der Logdateien (relativ zu :data:`shared.root_path`).
LOGDIR = 'logs'

#: Format der Logausgaben.
LOGFORMAT = '%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s'

#: Datumsformat der Logausgaben.
LOGDATEFMT = '%Y-%m-%d %H:%M:%S'

#: Loglevel des Root-Loggers.
LOGLEVEL = logging.DEBUG

# ------------------------------------------------------------------------
# Türzustände
# ------------------------------------------------------------------------
DOOR_CLOSED = 1  #: Tür ist geschlossen (unterer Sensor hat ausgelöst)
DOOR_OPENING = 2 #: Tür wird geöffnet
DOOR_OPEN = 3    #: Tür ist offen (oberer Sensor hat ausgelöst)
DOOR_CLOSING = 4 #: Tür wird geschlossen
DOOR_STUCK = 5   #: Tür klemmt oder befindet sich in unbekannter Position

#: Zustände, in denen sich die Tür bewegt (und ein Zeitstempel gesetzt ist).
DOOR_MOVING = (DOOR_OPENING, DOOR_CLOSING)

#: Anzeigenamen der Türzustände.
DOOR_STATE_NAMES = {
    DOOR_CLOSED: 'Closed',
    DOOR_OPENING: 'Opening',
    DOOR_OPEN: 'Open',
    DOOR_CLOSING: 'Closing',
    DOOR_STUCK: 'Stuck',
}

# ------------------------------------------------------------------------
# Umgebungsvariablen
# ------------------------------------------------------------------------
ENV_STUCK_DOOR_SECONDS = 'STUCK_DOOR_SECONDS'
ENV_AUTO_OPEN_CRON = 'AUTO_OPEN_CRON'
ENV_AUTO_CLOSE_CRON = 'AUTO_CLOSE_CRON'
ENV_DISCORD_WEBHOOK_URL = 'DISCORD_WEBHOOK_URL'
