#! /usr/bin/python3
# -*- coding: utf8 -*-
"""
Zeitgesteuertes Öffnen und Schließen der Tür.

Die Schaltzeiten werden als Crontab-Ausdrücke (5 Felder, lokale Zeit) über die
Umgebungsvariablen ``AUTO_OPEN_CRON`` und ``AUTO_CLOSE_CRON`` vorgegeben und mit
``croniter`` ausgewertet. Zur jeweiligen Zeit wird nur der Auftrag an die
Türsteuerung gegeben (:meth:`door.DoorController.RequestOpen` bzw.
:meth:`door.DoorController.RequestClose`), ob die Tür ihr Ziel erreicht, ist Sache
der Steuerung.
"""
# --------------------------------------------------------------------------------------------------
import datetime
import threading
# --------------------------------------------------------------------------------------------------
from croniter import croniter
# --------------------------------------------------------------------------------------------------
from shared import LoggableClass
from config import * # pylint: disable=W0614
# --------------------------------------------------------------------------------------------------
class CronJob:
    """
    Ein einzelner Eintrag des :class:`JobTimer`.
    """
    def __init__(self, name:str, expression:str, action:callable, start:datetime.datetime):
        #: Name für die Logausgaben.
        self.name = name

        #: Crontab-Ausdruck.
        self.expression = expression

        #: Wird ohne Parameter zur Schaltzeit gerufen.
        self.action = action

        self._iter = croniter(expression, start)

        #: Nächster Ausführungszeitpunkt.
        self.next_time = self._iter.get_next(datetime.datetime)

    def Advance(self, dtnow:datetime.datetime):
        """
        Setzt :attr:`next_time` auf den ersten Zeitpunkt nach ``dtnow``.
        """
        while self.next_time <= dtnow:
            self.next_time = self._iter.get_next(datetime.datetime)
# --------------------------------------------------------------------------------------------------
class JobTimer(LoggableClass):
    """
    Diese Klasse führt die registrierten :class:`CronJob` - Einträge in einem eigenen
    Thread zu ihren Zeiten aus.

    .. code-block:: python

        timer = JobTimer()
        timer.AddJob("auto-open", "30 7 * * *", controller.RequestOpen)
        timer.Start()
        ...
        timer.Terminate()
        timer.Join(2.0)
    """
    def __init__(self, now:callable = datetime.datetime.now):
        """
        :param callable now: Liefert die aktuelle Zeit als ``datetime``.
        """
        LoggableClass.__init__(self, name = 'JobTimer')

        #: Liste der registrierten Einträge.
        self.jobs = []

        #: Zeitquelle.
        self.now = now

        #: Termination-Flag, solange dieses ``False`` ist, wird der Timer weiter
        #: ausgeführt
        self._terminate = False

        #: Mit dem :attr:`Termination-Flag<_terminate>` verknüpfte Condition,
        #: wird u.a. zum Schlafenlegen des :attr:`Timer-Threads<_thread>` verwendet.
        self._terminate_condition = threading.Condition()

        #: Der Thread, in dem der Timer ausgeführt wird. Läuft als ``daemon`` damit
        #: der Thread den Shutdown nicht blockieren kann.
        self._thread = threading.Thread(target = self, name = 'JobTimer', daemon = True)

    def AddJob(self, name:str, expression:str, action:callable)->CronJob:
        """
        Registriert ``action`` zur Ausführung nach dem Crontab-Ausdruck ``expression``.

        :raises ValueError: Wenn ``expression`` ungültig ist.
        """
        if not croniter.is_valid(expression):
            raise ValueError("Invalid cron expression %r for %s." % (expression, name))
        with self._terminate_condition:
            job = CronJob(name, expression, action, self.now())
            self.jobs.append(job)
            self._terminate_condition.notify_all()
        self.info("Added job %r (%s), next run at %s.", name, expression, job.next_time)
        return job

    def RunPendingJobs(self, dtnow:datetime.datetime)->list:
        """
        Führt alle Einträge aus, deren Zeitpunkt erreicht ist. Jeder Eintrag wird dabei
        höchstens einmal ausgeführt, verpasste Wiederholungen werden übersprungen.
        Fehler der Aktionen werden protokolliert.

        :returns: Die Namen der ausgeführten Einträge.
        """
        fired = []
        for job in list(self.jobs):
            if job.next_time > dtnow:
                continue
            self.info("Running job %r, scheduled for %s.", job.name, job.next_time)
            try:
                job.action()
            except Exception:
                self.exception("Error while running job %r.", job.name)
            fired.append(job.name)
            job.Advance(dtnow)
            self.debug("Next run of %r at %s.", job.name, job.next_time)
        return fired

    def GetWaitTime(self, dtnow:datetime.datetime)->float:
        """
        Liefert die Sekunden bis zum nächsten fälligen Eintrag, höchstens aber
        :data:`config.JOBTIMER_MAX_WAIT`.
        """
        waittime = JOBTIMER_MAX_WAIT
        for job in self.jobs:
            waittime = min(waittime, (job.next_time - dtnow).total_seconds())
        return max(waittime, 0.0)

    def Terminate(self):
        """
        Setzt das :attr:`Termination-Flag<_terminate>` und veranlasst so den
        :attr:`Timer-Thread<_thread>`, die Loop beim nächstmöglichen Zeitpunkt zu beenden.
        """
        self.info("Terminating JobTimer.")
        with self._terminate_condition:
            self._terminate = True
            self._terminate_condition.notify_all()

    def Start(self):
        """
        Startet den :attr:`Timer-Thread<_thread>`.
        """
        self.info("Starting JobTimer with %d job(s).", len(self.jobs))
        self._thread.start()

    def Join(self, timeout = None)->bool:
        """
        Wartet bis der :attr:`Timer-Thread<_thread>` sich beendet oder das Timeout
        ``timeout`` erreicht wurde.

        :returns: ``True`` wenn sich der :attr:`Timer-Thread<_thread>` in der angegebenen
            Zeit beendet hat.
        """
        if not self.IsRunning():
            return True
        self._thread.join(timeout)
        return not self.IsRunning()

    def IsRunning(self)->bool:
        """
        Gibt zurück, ob der :attr:`Timer-Thread<_thread>` noch läuft.
        """
        return self._thread.is_alive()

    def ShouldTerminate(self)->bool:
        """
        Liefert ``True`` wenn das :attr:`Termination-Flag<_terminate>` gesetzt ist.
        """
        with self._terminate_condition:
            return self._terminate

    def _run(self):
        self.info("JobTimer started.")
        while not self.ShouldTerminate():
            dtnow = self.now()
            self.RunPendingJobs(dtnow)

            with self._terminate_condition:
                if self._terminate:
                    break
                self._terminate_condition.wait(self.GetWaitTime(dtnow))

        self.info("JobTimer stopped.")

    def __call__(self):
        """
        Einstiegspunkt des :attr:`Timer-Thread<_thread>`.
        Ruft im wesentlichen :meth:`_run`, fängt hier aber etwaige Exceptions ab
        und gibt diese im Log aus.
        """
        try:
            self._run()
        except Exception:
            self.exception("Error in JobTimer thread loop.")
# --------------------------------------------------------------------------------------------------
