#! /usr/bin/python3
# -*- coding: utf8 -*-
"""
Dieses Skript sammelt alle Tests aus seinem Verzeichnis und führt diese aus.
Der Exitcode ist 1, wenn mindestens ein Test fehlgeschlagen ist.
"""
# --------------------------------------------------------------------------------------------------
import sys
import unittest
import os
# --------------------------------------------------------------------------------------------------
def _run()->bool:
    sys.path.insert(0, os.path.dirname(__file__))
    loader = unittest.defaultTestLoader
    suite = loader.discover(os.path.dirname(__file__), 'test_*.py')
    runner = unittest.TextTestRunner()
    return runner.run(suite).wasSuccessful()
# --------------------------------------------------------------------------------------------------
if __name__ == '__main__':
    sys.exit(0 if _run() else 1)
