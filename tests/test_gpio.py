#! /usr/bin/python3
# -*- coding: utf8 -*-
# ---------------------------------------------------------------------------------------
# pylint: disable=C0413, C0111, C0103
# ---------------------------------------------------------------------------------------
def _SetupPath():
    import sys
    import pathlib
    root = str(pathlib.Path(__file__).parent.parent)
    if root not in sys.path:
        sys.path.insert(0, root)
_SetupPath()
# ---------------------------------------------------------------------------------------
import sys
import types
import importlib
import unittest
from unittest import mock
import base
from config import * # pylint: disable=W0614; unused import
# ---------------------------------------------------------------------------------------
class GPIODummy(types.ModuleType):
    """
    Ersatz für ``RPi.GPIO``, merkt sich die Pegel der Ausgänge.
    """
    BCM = 11
    OUT = 0
    IN = 1
    LOW = 0
    HIGH = 1

    def __init__(self):
        super().__init__('RPi.GPIO')
        self.mode = None
        self.directions = {}
        self.levels = {}
        self.inputs = {}
        self.cleaned_up = []

    def setmode(self, mode):
        self.mode = mode

    def setup(self, channels, direction, initial = None):
        for pin in channels:
            self.directions[pin] = direction
            if initial is not None:
                self.levels[pin] = initial

    def output(self, channels, values):
        for pin, value in zip(channels, values):
            assert self.directions.get(pin) == self.OUT, "pin %d is no output" % (pin,)
            self.levels[pin] = value

    def input(self, pin):
        return self.inputs.get(pin, self.HIGH)

    def cleanup(self, channels):
        self.cleaned_up.extend(channels)
# ---------------------------------------------------------------------------------------
class Test_GPIOGateway(base.TestCase):

    def setUp(self):
        super().setUp()
        self.GPIO = GPIODummy()
        package = types.ModuleType('RPi')
        package.GPIO = self.GPIO
        patcher = mock.patch.dict(sys.modules, {'RPi': package, 'RPi.GPIO': self.GPIO})
        patcher.start()
        self.addCleanup(patcher.stop)
        sys.modules.pop('gpio', None)
        self.gpio = importlib.import_module('gpio')
        self.gateway = self.gpio.GPIOGateway()

    def Motor(self):
        return {pin: self.GPIO.levels[pin] for pin in (MOTOR_LOWER_PIN, MOTOR_RAISE_PIN)}

    def test_Setup(self):
        self.assertEqual(self.GPIO.mode, GPIODummy.BCM, "BCM numbering.")
        self.assertEqual(self.Motor(), {19: 0, 26: 0}, "Motor is off after setup.")
        self.assertEqual(self.GPIO.directions[SENSOR_CLOSED_PIN], GPIODummy.IN)
        self.assertEqual(self.GPIO.directions[SENSOR_OPEN_PIN], GPIODummy.IN)

    def test_Motor(self):
        self.gateway.DriveRaise()
        self.assertEqual(self.Motor(), {19: 0, 26: 1}, "Raise drives pin 26.")
        self.gateway.DriveLower()
        self.assertEqual(self.Motor(), {19: 1, 26: 0}, "Lower drives pin 19.")
        self.gateway.DriveStop()
        self.assertEqual(self.Motor(), {19: 0, 26: 0}, "Stop clears both pins.")

    def test_SensorsTriggerLow(self):
        self.assertFalse(self.gateway.ReadClosedSensor(), "HIGH is not triggered.")
        self.assertFalse(self.gateway.ReadOpenSensor(), "HIGH is not triggered.")
        self.GPIO.inputs[SENSOR_CLOSED_PIN] = GPIODummy.LOW
        self.assertTrue(self.gateway.ReadClosedSensor(), "LOW at pin 6 is closed.")
        self.assertFalse(self.gateway.ReadOpenSensor())
        self.GPIO.inputs[SENSOR_OPEN_PIN] = GPIODummy.LOW
        self.assertTrue(self.gateway.ReadOpenSensor(), "LOW at pin 13 is open.")

    def test_Release(self):
        with self.gateway:
            self.gateway.DriveRaise()
        self.assertEqual(self.Motor(), {19: 0, 26: 0}, "Motor is stopped on release.")
        self.assertEqual(self.GPIO.cleaned_up, [19, 26, 6, 13], "All pins are released.")

        self.gateway.Release()
        self.assertEqual(self.GPIO.cleaned_up, [19, 26, 6, 13], "Second release has no effect.")
# ---------------------------------------------------------------------------------------
if __name__ == "__main__":
    unittest.main()
