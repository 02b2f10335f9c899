#! /usr/bin/python3
# -*- coding: utf8 -*-
"""
Enthält die in der Steuerung verwendeten Konfigurationsdaten.

Diese sind über die :class:`shared.Config` - Klasse nachladbar. Die Werte aus der
Umgebung (siehe :meth:`shared.Config.LoadEnvironment`) überschreiben die hier
gesetzten Standardwerte.
"""
# ------------------------------------------------------------------------
from constants import * # pylint: disable=W0614,W0401
# ------------------------------------------------------------------------
#: Intervall der Türsteuerung in Sekunden (ein "Tick").
CONTROL_LOOP_INTERVAL = 0.01

#: Sekunden, nach denen eine sich bewegende Tür als klemmend gilt.
#: Muss über die Umgebungsvariable ``STUCK_DOOR_SECONDS`` gesetzt werden.
STUCK_DOOR_SECONDS = None

#: Crontab-Ausdruck für das automatische Öffnen (leer = deaktiviert).
AUTO_OPEN_CRON = ''

#: Crontab-Ausdruck für das automatische Schließen (leer = deaktiviert).
AUTO_CLOSE_CRON = ''

#: Webhook für Benachrichtigungen (leer = keine Benachrichtigungen).
DISCORD_WEBHOOK_URL = ''

# --------------------------------------------------------------------------------------------------
# Pins (BCM-Nummerierung)
# --------------------------------------------------------------------------------------------------
MOTOR_LOWER_PIN = 19  #: Motorausgang "Tür senken"
MOTOR_RAISE_PIN = 26  #: Motorausgang "Tür heben"
SENSOR_CLOSED_PIN = 6 #: Hall-Sensor am unteren Anschlag
SENSOR_OPEN_PIN = 13  #: Hall-Sensor am oberen Anschlag

#: Pegel eines ausgelösten Hall-Sensors (die Sensoren ziehen auf LOW).
SENSOR_TRIGGERED = 0

# --------------------------------------------------------------------------------------------------
# Server
# --------------------------------------------------------------------------------------------------
#: Port des Steuerungsservers (siehe :mod:`controlserver`).
CONTROLLER_PORT = 8080

#: Port des Temperaturservers (siehe :mod:`tempserver`).
TEMPERATURE_PORT = 8002

#: Verzeichnis der 1-Wire-Geräte.
W1_DEVICES_PATH = '/sys/bus/w1/devices'

# --------------------------------------------------------------------------------------------------
# Benachrichtigungen / Zeitsteuerung
# --------------------------------------------------------------------------------------------------
#: Maximale Anzahl wartender Benachrichtigungen.
NOTIFY_QUEUE_SIZE = 32

#: Timeout eines Webhook-Requests in Sekunden.
NOTIFY_TIMEOUT = 5.0

#: Maximale Schlafdauer des :class:`jobtimer.JobTimer` in Sekunden.
JOBTIMER_MAX_WAIT = 60.0
