#! /usr/bin/python3
# -*- coding: utf8 -*-
"""
Gateway auf Basis von ``RPi.GPIO``.

Motor
-----

Der Motortreiber hat zwei Eingänge, die an
:data:`MOTOR_LOWER_PIN <config.MOTOR_LOWER_PIN>` (GPIO19) und
:data:`MOTOR_RAISE_PIN <config.MOTOR_RAISE_PIN>` (GPIO26) hängen.
Es ist immer höchstens einer der beiden Ausgänge HIGH.

Hall-Sensoren
-------------

Die beiden Sensoren an :data:`SENSOR_CLOSED_PIN <config.SENSOR_CLOSED_PIN>` (GPIO6, unten) und
:data:`SENSOR_OPEN_PIN <config.SENSOR_OPEN_PIN>` (GPIO13, oben) ziehen den Pin auf
:data:`config.SENSOR_TRIGGERED` (LOW), sobald der Magnet an der Tür vor ihnen steht.

Nach :meth:`GPIOGateway.Release` sind die Motorpins wieder Eingänge, der Treiber
bekommt also kein Signal mehr.
"""
# --------------------------------------------------------------------------------------------------
import RPi.GPIO as GPIO
# --------------------------------------------------------------------------------------------------
from gateway import Gateway
from config import * # pylint: disable=W0614
# --------------------------------------------------------------------------------------------------
class GPIOGateway(Gateway):
    """
    Gateway für den Raspberry Pi (BCM-Nummerierung).
    """

    def __init__(self):
        Gateway.__init__(self, name = "GPIOGateway")

        #: Motorpins in der Reihenfolge (senken, heben).
        self.motor_pins = (MOTOR_LOWER_PIN, MOTOR_RAISE_PIN)

        #: Sensorpins in der Reihenfolge (unten, oben).
        self.sensor_pins = (SENSOR_CLOSED_PIN, SENSOR_OPEN_PIN)

        #: Wird von :meth:`Release` gesetzt.
        self.released = False

        GPIO.setmode(GPIO.BCM)

        self.debug("Setting pins %s to OUT.", self.motor_pins)
        GPIO.setup(list(self.motor_pins), GPIO.OUT, initial = GPIO.LOW)

        self.debug("Setting pins %s to IN.", self.sensor_pins)
        GPIO.setup(list(self.sensor_pins), GPIO.IN)

    def _IsTriggered(self, pin:int)->bool:
        return GPIO.input(pin) == SENSOR_TRIGGERED

    def _SetMotor(self, lower:int, raise_:int):
        GPIO.output(list(self.motor_pins), (lower, raise_))

    def ReadClosedSensor(self)->bool:
        return self._IsTriggered(SENSOR_CLOSED_PIN)

    def ReadOpenSensor(self)->bool:
        return self._IsTriggered(SENSOR_OPEN_PIN)

    def DriveRaise(self):
        self._SetMotor(GPIO.LOW, GPIO.HIGH)

    def DriveLower(self):
        self._SetMotor(GPIO.HIGH, GPIO.LOW)

    def DriveStop(self):
        self._SetMotor(GPIO.LOW, GPIO.LOW)

    def Release(self):
        """
        Schaltet den Motor ab und gibt alle verwendeten Pins frei
        (``GPIO.cleanup`` setzt diese wieder als Eingänge).
        Mehrfache Aufrufe haben keinen Effekt.
        """
        if self.released:
            return
        self.released = True
        self.info("Releasing GPIO pins.")
        try:
            self.DriveStop()
        finally:
            GPIO.cleanup(list(self.motor_pins + self.sensor_pins))
# --------------------------------------------------------------------------------------------------
