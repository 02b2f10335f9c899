#! /usr/bin/python3
# -*- coding: utf8 -*-
"""
Dieses Script startet die Türsteuerung und einen HTTP-Server auf dem Port
:data:`config.CONTROLLER_PORT`, über den die Tür bedient wird:

=========== ===================================================================
``/open``   Beauftragt das Öffnen der Tür (GET oder POST).
``/close``  Beauftragt das Schließen der Tür (GET oder POST).
``/status`` Liefert den aktuellen Zustand als Text, z.Bsp. ``Closing (7 seconds)``.
=========== ===================================================================

Die Antwort auf ``/open`` und ``/close`` wird sofort geschickt, die Tür bewegt sich
erst danach (siehe :mod:`door`).

Beenden
-------

Der Server läuft bis ``SIGINT`` oder ``SIGTERM``. Bricht die Steuerungsschleife wegen
eines Hardwarefehlers ab, wird der Server ebenfalls beendet. In allen Fällen wird der
Motor vor dem Ende abgeschaltet und die GPIO-Pins freigegeben.

Exitcodes: 0 = normales Ende, 1 = Fehler, 2 = ungültige Konfiguration.
"""
# ------------------------------------------------------------------------
import sys
import signal
import socketserver
import threading
from http import server
from urllib import parse
# --------------------------------------------------------------------------------------------------
import shared
import door
import notifier
import jobtimer
from shared import Config, ConfigurationError, getLogger
from config import * # pylint: disable=W0614
# --------------------------------------------------------------------------------------------------
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
# --------------------------------------------------------------------------------------------------
class ControlHandler(server.BaseHTTPRequestHandler):
    """
    Handler für die Requests an den :class:`ControlServer`.
    """
    def _Respond(self, text:str, code:int = 200):
        content = text.encode('utf-8')
        self.send_response(code)
        self.send_header('Content-Type', 'text/plain; charset=utf-8')
        self.send_header('Content-Length', str(len(content)))
        self.end_headers()
        self.wfile.write(content)

    def do_GET(self):
        """
        Behandelt ein Request an einen der Pfade aus der Moduldokumentation.
        Query-Parameter werden ignoriert, alle anderen Pfade liefern 404.
        """
        controller = self.server.controller
        path = parse.urlsplit(self.path).path
        if path == '/open':
            controller.RequestOpen()
            self._Respond("Requesting door open.")
        elif path == '/close':
            controller.RequestClose()
            self._Respond("Requesting door close.")
        elif path == '/status':
            self._Respond(controller.GetStatusText())
        else:
            self.send_error(404, message = "Invalid path %r" % (path,))

    do_POST = do_GET

    def log_message(self, format, *args): # pylint: disable=W0622
        getLogger('http').info("%s - " + format, self.address_string(), *args)
# --------------------------------------------------------------------------------------------------
class ControlServer(socketserver.ThreadingMixIn, server.HTTPServer):
    """
    Server für threaded HTTP-Requests an die Türsteuerung.
    """
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address:tuple, controller):
        #: Die :class:`door.DoorController` - Instanz.
        self.controller = controller
        super().__init__(address, ControlHandler)
# --------------------------------------------------------------------------------------------------
def RegisterJobs(logger, timer:jobtimer.JobTimer, controller):
    """
    Registriert die Crontab-Ausdrücke aus ``AUTO_OPEN_CRON`` und ``AUTO_CLOSE_CRON``
    (falls gesetzt) am ``timer``.
    """
    open_cron = Config.Get('AUTO_OPEN_CRON')
    if open_cron:
        timer.AddJob('auto-open', open_cron, controller.RequestOpen)
        logger.info("Added handler for auto-open cron.")

    close_cron = Config.Get('AUTO_CLOSE_CRON')
    if close_cron:
        timer.AddJob('auto-close', close_cron, controller.RequestClose)
        logger.info("Added handler for auto-close cron.")
# --------------------------------------------------------------------------------------------------
def Serve(logger, gateway, address:tuple = None)->int:
    """
    Startet Benachrichtigung, Türsteuerung, Zeitsteuerung und den HTTP-Server mit dem
    ``gateway`` und kehrt erst nach dem Ende des Servers zurück. Die Konfiguration muss
    bereits geladen sein.

    :returns: Den Exitcode.
    """
    if address is None:
        address = ("", CONTROLLER_PORT)

    sink = notifier.Notifier(Config.Get('DISCORD_WEBHOOK_URL'))
    controller = door.DoorController(
        gateway, Config.Get('STUCK_DOOR_SECONDS'), notify = sink.Send
    )
    timer = jobtimer.JobTimer()
    ds = ControlServer(address, controller)

    def _OnFailure(_exc):
        # shutdown() wartet auf serve_forever, also nicht im Steuerungsthread
        threading.Thread(target = ds.shutdown, name = 'shutdown', daemon = True).start()

    controller.SetFailureHandler(_OnFailure)

    result = EXIT_OK
    try:
        RegisterJobs(logger, timer, controller)
        sink.Start()
        controller.Start()
        if timer.jobs:
            timer.Start()
        logger.info("Serving at %r.", ds.server_address)
        ds.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutdown due to keyboardinterrupt.")
    except Exception:
        logger.exception("Unhandled error, stopped.")
        result = EXIT_FAILURE
    finally:
        timer.Terminate()
        timer.Join(2.0)
        controller.Terminate()
        if not controller.Join(2.0):
            logger.error("Door control loop did not stop in time.")
        ds.server_close()
        sink.Terminate()

    if controller.failure is not None:
        logger.error("Stopped due to door control failure: %s", controller.failure)
        result = EXIT_FAILURE
    return result
# --------------------------------------------------------------------------------------------------
def _RaiseKeyboardInterrupt(signum, _frame):
    raise KeyboardInterrupt("Received signal %d." % (signum,))
# --------------------------------------------------------------------------------------------------
def Main()->int:
    """
    Initialisiert Logging und Konfiguration, öffnet die GPIO-Pins und startet
    :func:`Serve`. ``SIGTERM`` wird wie ``SIGINT`` behandelt.

    :returns: Den Exitcode (siehe Moduldokumentation).
    """
    logger = getLogger("controller")
    signal.signal(signal.SIGTERM, _RaiseKeyboardInterrupt)
    try:
        try:
            Config.LoadEnvironment()
        except ConfigurationError as exc:
            logger.error("Invalid configuration, stopped: %s", exc)
            return EXIT_CONFIG

        try:
            # erst hier importieren, RPi.GPIO lässt sich nur auf dem Pi laden
            import gpio
            gateway = gpio.GPIOGateway()
        except Exception:
            logger.exception("Error during GPIO initialization, stopped.")
            return EXIT_FAILURE

        with gateway:
            try:
                return Serve(logger, gateway)
            except KeyboardInterrupt:
                logger.info("Shutdown due to keyboardinterrupt.")
                return EXIT_OK
            except Exception:
                logger.exception("Error during initialization, stopped.")
                return EXIT_FAILURE
    finally:
        logger.info("Finished.")
        shared.logging.shutdown()
# ------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(Main())
