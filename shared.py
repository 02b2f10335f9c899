#! /usr/bin/python3
# -*- coding: utf8 -*-
"""
Enthält gemeinsam genutzte Klassen und Funktionen.
"""
# --------------------------------------------------------------------------------------------------
# pylint: disable=C0103, W0603, R0903
# --------------------------------------------------------------------------------------------------
import pathlib
import logging
import os
import importlib
from logging import handlers
# --------------------------------------------------------------------------------------------------
import dotenv
from croniter import croniter
# --------------------------------------------------------------------------------------------------
import config
from constants import * # pylint: disable=W0614
# --------------------------------------------------------------------------------------------------
#: Basispfad, hier liegen auch die Skripte und Module.
root_path = pathlib.Path(__file__).parent

#: Pfad zu den Logging-Dateien.
log_path = root_path.joinpath(LOGDIR)

#: Guard für die Ausführung von :func:`configureLogging`
logging_configured = False
# --------------------------------------------------------------------------------------------------
class ConfigurationError(ValueError):
    """
    Wird geworfen, wenn die Konfiguration aus der Umgebung fehlt oder ungültig ist.
    Ein solcher Fehler ist beim Start immer fatal.
    """
# --------------------------------------------------------------------------------------------------
def configureLogging(name:str, filemode:str = 'a'):
    """
    Führt eine Basiskonfiguration des logging durch.
    Verwendet :data:`constants.LOGFORMAT`, :data:`constants.LOGDATEFMT` und
    :data:`constants.LOGLEVEL`.
    Wenn die Konfiguration in diesem Prozess bereits durchgeführt
    wurde, hat der Aufruf keinen Effekt (dazu wird :data:`logging_configured` verwendet).

    :param str name: Name des Loggers. Unter diesem wird mit der Dateinamenserweiterung (Extension)
            *.log* die Logdatei in :data:`log_path` erzeugt.

    :param str filemode: Dateimodus für die Logging-Datei.
            Muss ein Schreibmodus sein, Standard ist ``a``.
    """

    global logging_configured
    if logging_configured:
        return

    logging_configured = True

    log_path.mkdir(parents = True, exist_ok = True)

    logfilepath = log_path.joinpath(name + '.log')

    if 'w' not in filemode:
        with logfilepath.open(filemode) as f:
            f.write(os.linesep)
            f.write('-' * 80)
            f.write(os.linesep)

    formatter = logging.Formatter(LOGFORMAT, LOGDATEFMT)
    handler = handlers.TimedRotatingFileHandler(
        str(logfilepath),
        when = 'd',
        interval = 1,
        backupCount = 5
    )
    handler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.setLevel(LOGLEVEL)
    logger.addHandler(handler)
    logger.info("Started, pid = %s.", os.getpid())
# --------------------------------------------------------------------------------------------------
def getLogger(name = None, filemode = 'a'):
    """
    Liefert eine Logger-Instanz.
    Ruft zuerst immer :func:`configureLogging` mit ``name`` und ``filemode`` auf,
    gibt dann einen Logger aus logging zurück.

    :param str name: Name des Loggers. Unter diesem wird mit der Dateinamenserweiterung (Extension)
            *.log* die Logdatei in :data:`log_path` erzeugt.

    :param str filemode: Dateimodus für die Logging-Datei.
            Muss ein Schreibmodus sein, Standard ist ``a``.
    """
    configureLogging('root' if (name is None) else name, filemode)
    return logging.getLogger(name)
# --------------------------------------------------------------------------------------------------
class LoggableClass:
    """
    Basisklasse für alle Klassen mit Logausgabe.
    Fügt ein Attribut ``logger`` zur Instanz hinzu, auf dessen Eigenschaften
    dann via ``self`` zugegriffen werden kann.
    Also statt ``self.logger.info(..)`` kann dann einfach ``self.info(..)``
    verwendet werden.

    Alle anderen unbekannten Attribute werden über :meth:`Config.Get` aufgelöst,
    ``self.CONTROL_LOOP_INTERVAL`` liefert also den aktuellen Konfigurationswert.
    """
    def __init__(self, logger:logging.Logger = None, name:str = None):
        """
        Initialisiert die logbare Instanz.

        :param logging.Logger logger: Instanz eines Loggers, der verwendetet werden soll.
            Wenn ``None`` oder nicht angegeben, wird mittels _func:`getLogger`
            eine neue Logger-Instanz erzeugt.

        :param str name: Name für einen etwaigen neu zu erzeugenden
            Logger (also nur zutreffend, wenn ``logger == None`` ist).
            Dieser wird an :func:`getLogger` übergeben.
        """
        #: Zu verwendende Logger-Instanz. Ist immer gesetzt.
        self.logger = getLogger(name) if logger is None else logger

    def __getattr__(self, name:str):
        """
        Überladung des Operators, prüft ob ``name`` als Attribut in :attr:`logger` vorhanden
        ist und liefert im positiven Fall dieses zurück.
        Ansonsten wird der Konfigurationswert ``name`` geliefert oder ein
        `AttributeError` geworfen.
        """
        if name == 'logger':
            raise AttributeError(name)
        if hasattr(self.logger, name):
            return getattr(self.logger, name)
        return Config.Get(name, case_sensitive = True)
# --------------------------------------------------------------------------------------------------
class _NOTSET:
    pass
# --------------------------------------------------------------------------------------------------
class Config:
    """
    Singleton-Klasse für den zentralen Zugriff auf die veränderbare Konfiguration.

    Lädt alle Elemente aus :mod:`config` und stellt diese hier über :meth:`Get` zur Verfügung.
    Änderungen am Inhalte von :mod:`config` können via :meth:`Update` neu eingeladen werden
    und stehen dann beim nächsten Zugriff mittels :meth:`Get` zur Verfügung.
    Groß-/Kleinschreibung wird dabei ignoriert, solange der jeweilige Parameter ``case_sensitive``
    nicht mit ``True`` evaluiert.

    Die Werte aus der Umgebung (Umgebungsvariablen bzw. eine ``.env``-Datei) werden mit
    :meth:`LoadEnvironment` geprüft und übernommen, sie bleiben auch nach einem
    :meth:`Update` erhalten.

    .. code-block:: python

        >>> Config.LoadEnvironment()
        >>> Config.Get("STUCK_DOOR_SECONDS")
        30
        >>> Config.Set("STUCK_DOOR_SECONDS", 60) # temporär ändern
        >>> Config.Get("stuck_door_seconds")
        60
        >>> Config.Update() # aus Datei und Umgebung nachladen
        >>> Config.Get("STUCK_DOOR_SECONDS")
        30
    """

    # pylint: disable=W0212

    #: Dieser Class-Member hält die Singleton-Instanz.
    _instance = None

    @classmethod
    def Get(cls, name:str, default = _NOTSET, case_sensitive:bool = False):
        """
        Gibt einen benannten Konfigurationsparameter zurück.

        :param str name: Name des Parameters.

        :param any default: Standardwert der zurückgeliefert werden soll,
            wenn ``name`` nicht gefunden wurde.

        :param bool case_sensitive: Gibt an, ob die Groß-/Kleinschreibung beim Finden des
            Konfigurationswertes für ``name`` beachtet werden soll.

        :returns: Den gefundenen Konfigurationswert oder den optional angegebenen Standardwert.

        :raises AttributeError: Falls der Konfigurationswert nicht gefunden wurde UND kein
            Standardwert angegeben ist.
        """
        cfg = cls.GetInstance()
        return cfg._Get(name, default, case_sensitive = case_sensitive)

    @classmethod
    def Set(cls, name: str, value, do_update:bool = True):
        """
        Setzt den Wert des Konfigurationsparameters ``name`` auf ``value``.

        :param bool do_update: Wenn ``True`` werden etwaige Update-Handler benachrichtigt.
            Siehe dazu auch :meth:`RegisterUpdateHandler`.

        .. warning::

            Die Werte werden nicht dauerhaft gesetzt, spätestens nach dem nächsten
            :meth:`Update` oder Neustart ist der Wert wieder auf dem Ursprung.
        """
        cfg = cls.GetInstance()
        cfg._Set(name, value, do_update = do_update)

    @classmethod
    def Update(cls):
        """
        Lädt die Konfiguration aus :mod:`config` neu nach, übernimmt die zuletzt
        geladenen Umgebungswerte und ruft dann die installierten Update-Handler auf.
        """
        cfg = cls.GetInstance()
        cfg._Update()

    @classmethod
    def LoadEnvironment(cls, dotenv_path = None):
        """
        Liest die Konfiguration aus den Umgebungsvariablen, vorher wird eine etwaige
        ``.env``-Datei mittels ``dotenv.load_dotenv`` geladen (bereits gesetzte
        Umgebungsvariablen haben Vorrang).

        Ausgewertet werden:

          - ``STUCK_DOOR_SECONDS``: Pflicht, ganze Zahl >= 0
          - ``AUTO_OPEN_CRON``, ``AUTO_CLOSE_CRON``: optionale Crontab-Ausdrücke
          - ``DISCORD_WEBHOOK_URL``: optionaler Webhook

        :param dotenv_path: Pfad zur ``.env``-Datei. Bei ``None`` wird diese gesucht.

        :raises ConfigurationError: Wenn ein Wert fehlt oder ungültig ist. In diesem
            Fall wird keiner der Werte übernommen.
        """
        cfg = cls.GetInstance()
        cfg._LoadEnvironment(dotenv_path)

    @classmethod
    def RegisterUpdateHandler(cls, hdl):
        """
        Registriert einen Handler ``hdl`` der ohne Parameter gerufen wird, wenn die Konfiguration
        aktualisiert wurde.
        """
        cfg = cls.GetInstance()
        cfg._RegisterUpdateHandler(hdl)

    @classmethod
    def RemoveUpdateHandler(cls, hdl):
        """
        Gegenstück zu :meth:`RegisterUpdateHandler`, entfernt den Handler ``hdl`` wieder.
        """
        cfg = cls.GetInstance()
        cfg._RemoveUpdateHandler(hdl)

    @classmethod
    def GetInstance(cls):
        """
        Gibt die Singleton-Instanz dieser Klasse zurück.
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __init__(self):
        self.logger = getLogger(name = 'config')
        self.update_handlers = set()
        #: Die zuletzt mit :meth:`LoadEnvironment` übernommenen Werte.
        self.environment = {}

    def _CallUpdateHandlers(self):
        for hdl in self.update_handlers:
            try:
                hdl()
            except Exception:
                self.logger.exception('Error while calling update handler.')

    def _Update(self):
        importlib.reload(config)
        for name, value in self.environment.items():
            setattr(config, name, value)
        self._CallUpdateHandlers()

    def _ReadEnvironment(self)->dict:
        raw = os.environ.get(ENV_STUCK_DOOR_SECONDS, '').strip()
        if not raw:
            raise ConfigurationError("%s is not set." % (ENV_STUCK_DOOR_SECONDS,))
        try:
            stuck_seconds = int(raw)
        except ValueError:
            raise ConfigurationError(
                "%s has to be an integer, got %r." % (ENV_STUCK_DOOR_SECONDS, raw)
            ) from None
        if stuck_seconds < 0:
            raise ConfigurationError(
                "%s must not be negative, got %d." % (ENV_STUCK_DOOR_SECONDS, stuck_seconds)
            )

        values = {
            'STUCK_DOOR_SECONDS': stuck_seconds,
            'DISCORD_WEBHOOK_URL': os.environ.get(ENV_DISCORD_WEBHOOK_URL, '').strip(),
        }

        for name in (ENV_AUTO_OPEN_CRON, ENV_AUTO_CLOSE_CRON):
            expression = os.environ.get(name, '').strip()
            if expression and not croniter.is_valid(expression):
                raise ConfigurationError("%s is not a valid cron expression: %r" % (name, expression))
            values[name] = expression

        return values

    def _LoadEnvironment(self, dotenv_path = None):
        if dotenv.load_dotenv(dotenv_path):
            self.logger.info("Loaded environment file.")
        values = self._ReadEnvironment()
        self.environment = values
        for name, value in values.items():
            self._Set(name, value, do_update = False)
        self.logger.info(
            "Loaded environment: stuck after %d seconds, auto open %r, auto close %r, "
            "notifications %s.",
            values['STUCK_DOOR_SECONDS'], values['AUTO_OPEN_CRON'], values['AUTO_CLOSE_CRON'],
            "enabled" if values['DISCORD_WEBHOOK_URL'] else "disabled"
        )
        self._CallUpdateHandlers()

    def _RegisterUpdateHandler(self, hdl):
        self.update_handlers.add(hdl)

    def _RemoveUpdateHandler(self, hdl):
        self.update_handlers.discard(hdl)

    def _Set(self, name, value, do_update = True):
        self.logger.debug("Setting %r to %r.", name, value)
        setattr(config, name, value)
        if do_update:
            self._CallUpdateHandlers()

    def _Get(self, name, default = _NOTSET, case_sensitive = False):

        if not case_sensitive:
            v = getattr(config, name.upper(), _NOTSET)
            if v is not _NOTSET:
                return v

        v = getattr(config, name, _NOTSET)
        if v is not _NOTSET:
            return v

        if default is not _NOTSET:
            self.logger.warning('Config %r not found, return default %r.', name, default)
            return default

        self.logger.error('Config %r not found!', name)
        raise AttributeError("No config %r found!" % (name,))
# --------------------------------------------------------------------------------------------------
