#! /usr/bin/python3
# -*- coding: utf8 -*-
"""
Dieses Modul enthält die eigentliche Türsteuerung.

Zustände
--------

Die Tür befindet sich immer in genau einem der folgenden Zustände:

=============================== ==========================================================
:data:`constants.DOOR_CLOSED`   Tür ist unten, kein automatischer Wechsel.
:data:`constants.DOOR_OPENING`  Tür wird gehoben, bis der obere Sensor auslöst oder
                                die Zeit abgelaufen ist.
:data:`constants.DOOR_OPEN`     Tür ist oben, kein automatischer Wechsel.
:data:`constants.DOOR_CLOSING`  Tür wird gesenkt, bis der untere Sensor auslöst oder
                                die Zeit abgelaufen ist.
:data:`constants.DOOR_STUCK`    Tür klemmt oder die Position ist unbekannt. Nur ein
                                neues Öffnen / Schließen verlässt diesen Zustand.
=============================== ==========================================================

Zusammen mit dem Zustand wird der Zeitpunkt gespeichert, an dem dieser betreten wurde.
Dieser ist nur bei :data:`constants.DOOR_OPENING` und :data:`constants.DOOR_CLOSING`
gesetzt, ansonsten ``None``. Beides zusammen liegt als Tuple in
:attr:`DoorController._state` und wird immer komplett unter
:attr:`DoorController._state_lock` ausgetauscht, ein Leser sieht also nie einen
Zustand ohne passenden Zeitstempel.

Ablauf
------

:meth:`DoorController.RequestOpen` und :meth:`DoorController.RequestClose` (vom HTTP-Server
oder dem :class:`jobtimer.JobTimer`) setzen lediglich den neuen Zustand und kehren sofort
zurück. Den Motor schaltet ausschließlich die Steuerungsschleife im eigenen Thread, die alle
:data:`config.CONTROL_LOOP_INTERVAL` Sekunden :meth:`DoorController.Tick` aufruft.
Der Motorbefehl wird dabei in jedem Durchlauf erneut gesetzt.

Wenn ein Auftrag während der Bewegung in die andere Richtung kommt, wird die Richtung im
nächsten Durchlauf ohne Pause umgeschaltet.

Klassen und Funktionen
----------------------

"""
# --------------------------------------------------------------------------------------------------
import time
import threading
# --------------------------------------------------------------------------------------------------
from shared import LoggableClass
from constants import * # pylint: disable=W0614
# --------------------------------------------------------------------------------------------------
MSG_FULLY_CLOSED = "Door is fully closed."
MSG_FULLY_OPEN = "Door is fully open."
MSG_STUCK = "Door is stuck!"
# --------------------------------------------------------------------------------------------------
def FormatStatus(state:int, seconds:int = None)->str:
    """
    Liefert die Anzeige des Zustands ``state``, also z.Bsp. ``"Closed"`` oder
    ``"Closing (7 seconds)"``.

    :param int seconds: Sekunden im aktuellen Zustand, wird nur bei sich bewegender
        Tür verwendet.
    """
    name = DOOR_STATE_NAMES[state]
    if state in DOOR_MOVING:
        return "%s (%d seconds)" % (name, seconds)
    return name
# --------------------------------------------------------------------------------------------------
class DoorController(LoggableClass):
    """
    Zustandsautomat der Tür samt Steuerungsschleife.
    """

    def __init__(
            self,
            gateway,
            stuck_seconds:int,
            notify:callable = None,
            clock:callable = time.monotonic):
        """
        Initialisiert die Steuerung und ermittelt den Startzustand über die Sensoren
        (siehe :meth:`DetermineInitialState`). Die Schleife wird erst mit :meth:`Start`
        gestartet.

        :param gateway.Gateway gateway: Zugriff auf Sensoren und Motor.

        :param int stuck_seconds: Nach wievielen ganzen Sekunden in Bewegung die Tür
            als klemmend gilt.

        :param callable notify: Optionaler Empfänger der Benachrichtigungen (ein Argument,
            die Nachricht). Muss sofort zurückkehren, siehe :meth:`notifier.Notifier.Send`.

        :param callable clock: Zeitquelle in Sekunden.
        """
        LoggableClass.__init__(self, name = "DoorController")

        #: Zugriff auf die Hardware.
        self.gateway = gateway

        #: Sekunden bis zum Zustand :data:`constants.DOOR_STUCK`.
        self.stuck_seconds = stuck_seconds

        #: Empfänger der Benachrichtigungen oder ``None``.
        self.notify = notify

        #: Zeitquelle.
        self.clock = clock

        #: Callable, das mit der Exception gerufen wird, wenn die Schleife wegen
        #: eines Fehlers beendet wurde.
        #:
        #: .. seealso::
        #:    :meth:`SetFailureHandler`
        self.failure_handler = None

        #: Die Exception, die zum Abbruch der Schleife geführt hat (sonst ``None``).
        self.failure = None

        self._state_lock = threading.Lock()

        #: Tuple aus Zustand und Eintrittszeit (siehe Moduldokumentation).
        self._state = (self.DetermineInitialState(), None)

        self._terminate = False
        self._terminate_condition = threading.Condition()
        self._thread = threading.Thread(target = self, name = 'DoorControl', daemon = True)

        self.info("Initial door state is %s.", DOOR_STATE_NAMES[self._state[0]])
    # -----------------------------------------------------------------------------------
    # --- Zustand -----------------------------------------------------------------------
    # -----------------------------------------------------------------------------------
    def DetermineInitialState(self)->int:
        """
        Ermittelt den Zustand der Tür anhand der Sensoren:

          - nur oben ausgelöst: :data:`constants.DOOR_OPEN`
          - nur unten ausgelöst: :data:`constants.DOOR_CLOSED`
          - keiner oder beide: :data:`constants.DOOR_STUCK`, die Position
            ist unbekannt (z.Bsp. Stromausfall während der Fahrt)
        """
        is_open = self.gateway.ReadOpenSensor()
        is_closed = self.gateway.ReadClosedSensor()
        if is_open and not is_closed:
            return DOOR_OPEN
        if is_closed and not is_open:
            return DOOR_CLOSED
        self.warning("Door position unknown (open = %s, closed = %s).", is_open, is_closed)
        return DOOR_STUCK

    def GetState(self)->tuple:
        """
        Gibt das Tuple aus aktuellem Zustand und Eintrittszeit zurück.
        Die Eintrittszeit ist ``None``, falls sich die Tür nicht bewegt.
        """
        with self._state_lock:
            return self._state

    def _SetState(self, state:int):
        since = self.clock() if state in DOOR_MOVING else None
        with self._state_lock:
            self._state = (state, since)

    def SecondsInState(self, snapshot:tuple = None)->int:
        """
        Liefert die ganzen Sekunden seit Eintritt in den aktuellen Zustand.

        :param tuple snapshot: Ein Tuple aus :meth:`GetState`, ansonsten wird
            der aktuelle Zustand verwendet.

        :raises RuntimeError: Wenn sich die Tür nicht bewegt (kein Zeitstempel).
        """
        state, since = self.GetState() if snapshot is None else snapshot
        if since is None:
            raise RuntimeError("Door is not moving (%s)." % (DOOR_STATE_NAMES[state],))
        return int(self.clock() - since)

    def GetStatusText(self)->str:
        """
        Gibt den Zustand als Text zurück, siehe :func:`FormatStatus`.
        """
        snapshot = self.GetState()
        state = snapshot[0]
        if state in DOOR_MOVING:
            return FormatStatus(state, self.SecondsInState(snapshot))
        return FormatStatus(state)

    def RequestOpen(self):
        """
        Beauftragt das Öffnen der Tür, unabhängig vom aktuellen Zustand.
        Der Motor wird erst im nächsten :meth:`Tick` geschaltet.
        """
        self.info("Raising door.")
        self._SetState(DOOR_OPENING)

    def RequestClose(self):
        """
        Beauftragt das Schließen der Tür, unabhängig vom aktuellen Zustand.
        Der Motor wird erst im nächsten :meth:`Tick` geschaltet.
        """
        self.info("Lowering door.")
        self._SetState(DOOR_CLOSING)
    # -----------------------------------------------------------------------------------
    # --- Steuerung ---------------------------------------------------------------------
    # -----------------------------------------------------------------------------------
    def Tick(self):
        """
        Ein Durchlauf der Steuerungsschleife.

        Bewegt sich die Tür, wird zuerst der Sensor der Zielposition geprüft.
        Hat dieser ausgelöst, wird der Motor angehalten und der Endzustand gesetzt.
        Ansonsten wird bei Überschreitung von :attr:`stuck_seconds`
        :meth:`HandleStuckDoor` gerufen oder der Motor erneut in Fahrtrichtung geschaltet.

        In allen anderen Zuständen passiert nichts.
        Fehler des Gateways werden nicht abgefangen.
        """
        snapshot = self.GetState()
        state = snapshot[0]
        if state == DOOR_CLOSING:
            reached = self.gateway.ReadClosedSensor()
            end_state = DOOR_CLOSED
            message = MSG_FULLY_CLOSED
            drive = self.gateway.DriveLower
        elif state == DOOR_OPENING:
            reached = self.gateway.ReadOpenSensor()
            end_state = DOOR_OPEN
            message = MSG_FULLY_OPEN
            drive = self.gateway.DriveRaise
        else:
            return

        if reached:
            self.gateway.DriveStop()
            self._SetState(end_state)
            self.info(message)
            self._Notify(message)
        elif self.SecondsInState(snapshot) > self.stuck_seconds:
            self.HandleStuckDoor()
        else:
            drive()

    def HandleStuckDoor(self):
        """
        Hält den Motor an und setzt den Zustand auf :data:`constants.DOOR_STUCK`.
        """
        self.gateway.DriveStop()
        self._SetState(DOOR_STUCK)
        self.error("STUCK, door did not reach its position within %d seconds.", self.stuck_seconds)
        self._Notify(MSG_STUCK)

    def _Notify(self, message:str):
        if self.notify is None:
            return
        try:
            self.notify(message)
        except Exception:
            self.exception("Failed to send notification %r.", message)
    # -----------------------------------------------------------------------------------
    # --- Thread ------------------------------------------------------------------------
    # -----------------------------------------------------------------------------------
    def SetFailureHandler(self, handler:callable):
        """
        Setzt den Handler, der mit der Exception gerufen wird, wenn die Schleife wegen
        eines Fehlers beendet wurde. ``None`` entfernt den Handler.
        """
        self.failure_handler = handler

    def Start(self):
        """
        Schaltet den Motor ab und startet den Thread der Steuerungsschleife.
        """
        self.info("Starting door control loop.")
        self.gateway.DriveStop()
        self._thread.start()

    def Terminate(self):
        """
        Beendet die Steuerungsschleife beim nächstmöglichen Zeitpunkt.
        """
        self.info("Terminating door control loop.")
        with self._terminate_condition:
            self._terminate = True
            self._terminate_condition.notify_all()

    def IsRunning(self)->bool:
        return self._thread.is_alive()

    def Join(self, timeout = None)->bool:
        """
        Wartet maximal ``timeout`` Sekunden auf das Ende der Steuerungsschleife.

        :returns: ``True`` wenn die Schleife beendet ist.
        """
        if self._thread.ident is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self):
        interval = self.CONTROL_LOOP_INTERVAL
        self.info("Door control loop started (interval %.3f seconds).", interval)
        while True:
            self.Tick()
            with self._terminate_condition:
                if self._terminate:
                    break
                self._terminate_condition.wait(interval)
        self.info("Door control loop stopped.")

    def __call__(self):
        """
        Einstiegspunkt des Threads. Bei einem Fehler wird dieser protokolliert und in
        :attr:`failure` abgelegt, der Motor (soweit möglich) angehalten und der
        :attr:`failure_handler` gerufen.
        """
        try:
            self._run()
        except Exception as exc:
            self.exception("Error in door control loop, stopped.")
            self.failure = exc
            try:
                self.gateway.DriveStop()
            except Exception:
                self.exception("Failed to stop motor after error.")
            if self.failure_handler:
                self.failure_handler(exc)
# --------------------------------------------------------------------------------------------------
