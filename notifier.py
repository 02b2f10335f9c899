# -*- coding: utf-8 -*-
"""
Anbindung an einen Discord-Webhook zum Versenden von Meldungen der Türsteuerung.

Die Meldungen werden über :meth:`Notifier.Send` in eine begrenzte Queue gestellt und von
einem eigenen Thread verschickt. Die Steuerung wartet also nie auf den Versand, und
Fehler beim Versand werden nur ins Log geschrieben.
"""
# --------------------------------------------------------------------------------------------------
import queue
import threading
# --------------------------------------------------------------------------------------------------
import requests
# --------------------------------------------------------------------------------------------------
from shared import LoggableClass
from config import * # pylint: disable=W0614
# --------------------------------------------------------------------------------------------------
def SendDiscordMessage(logger, url:str, message:str, timeout:float = NOTIFY_TIMEOUT)->bool:
    """
    Schickt die Nachricht ``message`` an den Discord-Webhook ``url``.

    :returns: Ob die Nachricht angenommen wurde. Fehler werden nur protokolliert.
    """
    logger.debug("Sending %r to webhook.", message)
    try:
        response = requests.post(url, json = {'content': message}, timeout = timeout)
    except Exception as exc:
        logger.error('Failed to send notification %r: %s', message, exc)
        return False

    if not response.ok:
        logger.warning(
            'Sending notification %r failed with status %s.',
            message, response.status_code
        )
        return False
    return True
# --------------------------------------------------------------------------------------------------
class Notifier(LoggableClass):
    """
    Verschickt Nachrichten asynchron an den Webhook :attr:`url`.
    Ist keine URL gesetzt, werden alle Nachrichten verworfen.

    .. code-block:: python

        n = Notifier("https://discord.com/api/webhooks/...")
        n.Start()
        n.Send("Door is fully open.") # kehrt sofort zurück
        n.Terminate()
    """

    #: Markiert das Ende der Queue.
    _STOP = object()

    def __init__(self, url:str, maxsize:int = NOTIFY_QUEUE_SIZE):
        LoggableClass.__init__(self, name = "Notifier")

        #: URL des Webhooks, leer = deaktiviert.
        self.url = url

        #: Queue der noch zu verschickenden Nachrichten.
        self.queue = queue.Queue(maxsize)

        self._thread = threading.Thread(target = self, name = 'Notifier', daemon = True)

    def IsEnabled(self)->bool:
        return bool(self.url)

    def Start(self):
        """
        Startet den Versand-Thread, falls ein Webhook konfiguriert ist.
        """
        if not self.IsEnabled():
            self.info("No webhook configured, notifications are disabled.")
            return
        self._thread.start()

    def Send(self, message:str)->bool:
        """
        Stellt ``message`` in die Queue und kehrt sofort zurück.
        Ist die Queue voll, wird die Nachricht verworfen.

        :returns: Ob die Nachricht angenommen wurde.
        """
        if not self.IsEnabled():
            return False
        try:
            self.queue.put_nowait(message)
        except queue.Full:
            self.warning("Notification queue is full, dropped %r.", message)
            return False
        return True

    def Terminate(self, timeout:float = 2.0):
        """
        Beendet den Versand-Thread, nachdem die bereits wartenden Nachrichten
        verschickt wurden (maximal ``timeout`` Sekunden).
        """
        if self._thread.ident is None:
            return
        try:
            self.queue.put(self._STOP, timeout = timeout)
        except queue.Full:
            self.warning("Could not stop notifier, queue is full.")
            return
        self._thread.join(timeout)

    def __call__(self):
        """
        Einstiegspunkt des Versand-Threads.
        """
        self.debug("Notifier started.")
        while True:
            message = self.queue.get()
            if message is self._STOP:
                break
            try:
                SendDiscordMessage(self.logger, self.url, message)
            except Exception:
                self.exception("Unexpected error while sending notification.")
        self.debug("Notifier stopped.")
# --------------------------------------------------------------------------------------------------
