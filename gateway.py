#! /usr/bin/python3
# -*- coding: utf8 -*-
"""
Schnittstelle zwischen Türsteuerung und Hardware.

Die Türsteuerung (:mod:`door`) kennt nur die Methoden dieser Klasse:

  - zwei Positionssensoren (unterer und oberer Anschlag), die jeweils nur
    ``True`` oder ``False`` liefern
  - einen zweikanaligen Motorausgang (heben / senken / aus)

Die Sensorwerte werden weder gefiltert noch entprellt, das übernimmt alleine die
Türsteuerung durch ihr Polling. Fehler beim Lesen oder Schreiben werden nicht
abgefangen, sondern an den Aufrufer weitergereicht.

Die konkrete Implementierung für den Raspberry Pi liegt in :mod:`gpio`.
"""
# --------------------------------------------------------------------------------------------------
from shared import LoggableClass
# --------------------------------------------------------------------------------------------------
class Gateway(LoggableClass):
    """
    Basisklasse aller Gateways. Kann als Context-Manager verwendet werden, beim
    Verlassen wird immer :meth:`Release` gerufen.
    """

    def ReadClosedSensor(self)->bool:
        """
        Gibt zurück, ob der untere Sensor die Tür am Anschlag meldet.
        """
        raise NotImplementedError

    def ReadOpenSensor(self)->bool:
        """
        Gibt zurück, ob der obere Sensor die Tür am Anschlag meldet.
        """
        raise NotImplementedError

    def DriveRaise(self):
        """
        Schaltet den Motor auf "heben" (Ausgänge senken / heben = 0 / 1).
        """
        raise NotImplementedError

    def DriveLower(self):
        """
        Schaltet den Motor auf "senken" (Ausgänge senken / heben = 1 / 0).
        """
        raise NotImplementedError

    def DriveStop(self):
        """
        Schaltet beide Motorausgänge ab.
        """
        raise NotImplementedError

    def Release(self):
        """
        Versetzt den Motorausgang in einen sicheren Zustand und gibt die Hardware frei.
        Standardmäßig wird nur :meth:`DriveStop` gerufen.
        """
        self.DriveStop()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.Release()
# --------------------------------------------------------------------------------------------------
