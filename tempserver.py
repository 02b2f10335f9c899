#! /usr/bin/python3
# -*- coding: utf8 -*-
"""
Dieses Script stellt unter dem Port :data:`config.TEMPERATURE_PORT` einen HTTP-Server
zur Verfügung, der die Temperaturen aller angeschlossenen DS18B20-Sensoren liefert.

``GET /temperatures/all`` liefert z.Bsp.:

.. code-block:: json

    {"sensors": {"28-0316a279d1ff": "71.38"}}

Die Werte sind Grad Fahrenheit mit zwei Nachkommastellen. Kann einer der Sensoren nicht
gelesen werden, schlägt die gesamte Anfrage mit 500 fehl.

Die Sensoren werden über das 1-Wire-Verzeichnis des Kernels gelesen
(:data:`config.W1_DEVICES_PATH`, Module ``w1-gpio`` und ``w1-therm``).

Logging
-------

Das Logging erfolgt nach *temperature*.
"""
# --------------------------------------------------------------------------------------------------
# pylint: disable=C0103,R0903
# --------------------------------------------------------------------------------------------------
import json
import pathlib
import socketserver
from http import server
from urllib import parse
# --------------------------------------------------------------------------------------------------
from config import * # pylint: disable=W0614
from shared import LoggableClass, getLogger
# --------------------------------------------------------------------------------------------------
class SensorError(RuntimeError):
    """
    Ein Sensor konnte nicht gelesen werden.
    """
# --------------------------------------------------------------------------------------------------
def CelsiusToFahrenheit(celsius:float)->float:
    return celsius * 9.0 / 5.0 + 32
# --------------------------------------------------------------------------------------------------
class Thermometers(LoggableClass):
    """
    Liest die DS18B20-Sensoren am 1-Wire-Bus.
    """

    def __init__(self, devices_path = W1_DEVICES_PATH):
        LoggableClass.__init__(self, name = "Thermometers")

        #: Verzeichnis der 1-Wire-Geräte.
        self.devices_path = pathlib.Path(devices_path)

    def ListSensors(self)->list:
        """
        Liefert die IDs aller Sensoren am Bus-Master.

        :raises SensorError: Wenn die Liste nicht gelesen werden kann.
        """
        slaves = self.devices_path / 'w1_bus_master1' / 'w1_master_slaves'
        try:
            lines = slaves.read_text().splitlines()
        except OSError as exc:
            raise SensorError("Failed to read sensor list %s: %s" % (slaves, exc)) from exc
        return [line.strip() for line in lines if line.strip()]

    def ReadCelsius(self, sensor_id:str)->float:
        """
        Liest die Temperatur des Sensors ``sensor_id`` in °C.

        Die Datei *w1_slave* hat zwei Zeilen, die erste endet mit ``YES`` wenn die
        Prüfsumme stimmt, die zweite enthält den Wert in Tausendstel Grad als ``t=23125``.

        :raises SensorError: Bei Lesefehlern oder falscher Prüfsumme.
        """
        path = self.devices_path / sensor_id / 'w1_slave'
        try:
            content = path.read_text()
        except OSError as exc:
            raise SensorError("Failed to read sensor %s: %s" % (sensor_id, exc)) from exc

        lines = content.splitlines()
        if len(lines) < 2 or not lines[0].strip().endswith('YES'):
            raise SensorError("CRC check of sensor %s failed." % (sensor_id,))

        _, sep, raw = lines[1].partition('t=')
        if not sep:
            raise SensorError("No temperature value from sensor %s." % (sensor_id,))
        try:
            return int(raw.strip()) / 1000.0
        except ValueError:
            raise SensorError("Invalid value %r from sensor %s." % (raw, sensor_id)) from None

    def ReadAll(self)->dict:
        """
        Liefert ein Dictionary mit der ID jedes Sensors und dessen Temperatur in
        Fahrenheit als Text (zwei Nachkommastellen).
        """
        result = {}
        for sensor_id in self.ListSensors():
            fahrenheit = CelsiusToFahrenheit(self.ReadCelsius(sensor_id))
            self.debug("sensor: %s temperature: %.2f F", sensor_id, fahrenheit)
            result[sensor_id] = "%.2f" % (fahrenheit,)
        return result
# --------------------------------------------------------------------------------------------------
class TemperatureHandler(server.BaseHTTPRequestHandler):
    """
    Handler für GET-Requests an den :class:`TemperatureServer`.
    """
    def do_GET(self):
        logger = getLogger('temperature')
        path = parse.urlsplit(self.path).path.rstrip('/')
        if path != '/temperatures/all':
            self.send_error(404, message = "Invalid path %r" % (path,))
            return

        try:
            sensors = self.server.thermometers.ReadAll()
        except SensorError as exc:
            logger.error("Failed to read temperatures: %s", exc)
            self.send_error(500, message = "Failed to read temperatures.")
            return

        content = json.dumps({'sensors': sensors}).encode('utf-8')
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(content)))
        self.end_headers()
        self.wfile.write(content)

    def log_message(self, format, *args): # pylint: disable=W0622
        getLogger('temperature').info("%s - " + format, self.address_string(), *args)
# --------------------------------------------------------------------------------------------------
class TemperatureServer(socketserver.ThreadingMixIn, server.HTTPServer):
    """
    Server für threaded HTTP-Requests.
    """
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address:tuple, thermometers:Thermometers):
        #: Die :class:`Thermometers` - Instanz.
        self.thermometers = thermometers
        super().__init__(address, TemperatureHandler)
# --------------------------------------------------------------------------------------------------
def Main():
    """
    Startet den Server öffentlich erreichbar mit dem Port :data:`config.TEMPERATURE_PORT`.
    Die Methode beendet sich erst durch Beenden des Servers resp. ein ``SIGINT``.
    """
    logger = getLogger(name = "temperature")
    logger.info("Starting using port %d, sensors at %s.", TEMPERATURE_PORT, W1_DEVICES_PATH)

    try:
        TemperatureServer(('', TEMPERATURE_PORT), Thermometers()).serve_forever()
    except KeyboardInterrupt:
        logger.info("Stopped due to keyboard interrupt.")
    except Exception:
        logger.exception("Unhandled error, abort.")
# --------------------------------------------------------------------------------------------------
if __name__ == '__main__':
    Main()
