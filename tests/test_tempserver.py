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
import pathlib
import tempfile
import threading
import unittest
import requests
import base
import tempserver
# ---------------------------------------------------------------------------------------
def _W1Slave(value:int, crc:str = 'YES')->str:
    return (
        "72 01 4b 46 7f ff 0e 10 57 : crc=57 %s\n"
        "72 01 4b 46 7f ff 0e 10 57 t=%d\n" % (crc, value)
    )
# ---------------------------------------------------------------------------------------
class _SensorTestCase(base.TestCase):
    """
    Legt ein temporäres 1-Wire-Verzeichnis an.
    """

    def setUp(self):
        super().setUp()
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = pathlib.Path(self.tmpdir.name)
        self.thermometers = tempserver.Thermometers(self.path)

    def tearDown(self):
        self.tmpdir.cleanup()
        super().tearDown()

    def AddSensors(self, **sensors):
        master = self.path / 'w1_bus_master1'
        master.mkdir(exist_ok = True)
        (master / 'w1_master_slaves').write_text(''.join(k + '\n' for k in sensors))
        for sensor_id, content in sensors.items():
            (self.path / sensor_id).mkdir()
            (self.path / sensor_id / 'w1_slave').write_text(content)
# ---------------------------------------------------------------------------------------
class Test_Thermometers(_SensorTestCase):

    def test_Conversion(self):
        self.assertEqual(tempserver.CelsiusToFahrenheit(100.0), 212.0)
        self.assertEqual(tempserver.CelsiusToFahrenheit(-40.0), -40.0)

    def test_ReadAll(self):
        self.AddSensors(**{'28-0316a279d1ff': _W1Slave(25000), '28-aa': _W1Slave(-1250)})
        self.assertEqual(
            self.thermometers.ReadAll(),
            {'28-0316a279d1ff': '77.00', '28-aa': '29.75'}
        )

    def test_NoSensors(self):
        self.AddSensors()
        self.assertEqual(self.thermometers.ReadAll(), {})

    def test_MissingBus(self):
        with self.assertRaises(tempserver.SensorError):
            self.thermometers.ListSensors()

    def test_CrcError(self):
        self.AddSensors(**{'28-bad': _W1Slave(25000, crc = 'NO')})
        with self.assertRaises(tempserver.SensorError):
            self.thermometers.ReadAll()

    def test_InvalidContent(self):
        self.AddSensors(**{'28-empty': '', '28-noval': 'crc=57 YES\nnothing here\n'})
        for sensor_id in ('28-empty', '28-noval', '28-missing'):
            with self.subTest(sensor_id = sensor_id):
                with self.assertRaises(tempserver.SensorError):
                    self.thermometers.ReadCelsius(sensor_id)
# ---------------------------------------------------------------------------------------
class Test_TemperatureServer(_SensorTestCase):

    def setUp(self):
        super().setUp()
        self.server = tempserver.TemperatureServer(('127.0.0.1', 0), self.thermometers)
        self.thread = threading.Thread(target = self.server.serve_forever, daemon = True)
        self.thread.start()
        self.url = 'http://127.0.0.1:%d' % (self.server.server_address[1],)

    def tearDown(self):
        self.server.shutdown()
        self.server.server_close()
        self.thread.join(1.0)
        super().tearDown()

    def test_GetAll(self):
        self.AddSensors(**{'28-01': _W1Slave(25000)})
        for path in ('/temperatures/all', '/temperatures/all/'):
            with self.subTest(path = path):
                response = requests.get(self.url + path, timeout = 2.0)
                self.assertEqual(response.status_code, 200)
                self.assertEqual(response.json(), {'sensors': {'28-01': '77.00'}})

    def test_SensorFailure(self):
        self.AddSensors(**{'28-bad': _W1Slave(25000, crc = 'NO')})
        response = requests.get(self.url + '/temperatures/all', timeout = 2.0)
        self.assertEqual(response.status_code, 500)

    def test_InvalidPath(self):
        response = requests.get(self.url + '/temperatures', timeout = 2.0)
        self.assertEqual(response.status_code, 404)
# ---------------------------------------------------------------------------------------
if __name__ == "__main__":
    unittest.main()
