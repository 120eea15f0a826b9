#!/usr/bin/env python3
import logging
import unittest

import numpy as np
from OrbitalTools import ATLogger, CHUNK_SIZE, N_JOBS, addlogger, config, getlogger
from OrbitalTools.test import TestWithTimer
from OrbitalTools.utils.utils import range_list, uptri2sym


class TestUtils(TestWithTimer):
    def test_range_list(self):
        self.assertEqual(range_list([1, 2, 3, 5, 6, 7, 9, 10]), "1-3,5-7,9,10")
        self.assertEqual(range_list([4, 0, 1]), "0,1,4")
        self.assertEqual(range_list([]), "")

    def test_uptri2sym(self):
        ref = np.array([
            [0, 1, 3],
            [1, 2, 4],
            [3, 4, 5],
        ])
        test = uptri2sym(list(range(6)), col_based=True)
        self.assertTrue(np.array_equal(ref, test))

        ref = np.array([
            [0, 1, 2],
            [1, 3, 4],
            [2, 4, 5],
        ])
        test = uptri2sym(list(range(6)))
        self.assertTrue(np.array_equal(ref, test))

        self.assertRaises(RuntimeError, uptri2sym, list(range(5)))


class TestLogging(TestWithTimer):
    def test_addlogger(self):
        @addlogger
        class Thing:
            LOG = None
            LOGLEVEL = "DEBUG"

        self.assertIsInstance(Thing.LOG, ATLogger)
        self.assertEqual(Thing.LOG.level, logging.DEBUG)
        self.assertTrue(Thing.LOG.name.endswith("Thing"))
        with self.assertLogs(Thing.LOG, level="DEBUG") as cm:
            Thing.LOG.debug("hello")
        self.assertEqual(len(cm.output), 1)

    def test_set_level(self):
        log = getlogger(name="test_set_level", level="WARNING")
        self.assertFalse(log.isEnabledFor(logging.DEBUG))
        log.debug("not shown")
        log.setLevel(logging.DEBUG)
        self.assertTrue(log.isEnabledFor(logging.DEBUG))
        with self.assertLogs(log, level="DEBUG") as cm:
            log.debug("shown")
        self.assertEqual(len(cm.output), 1)

    def test_getlogger(self):
        log = getlogger(name="test_logger", level="ERROR")
        self.assertIsInstance(log, ATLogger)
        self.assertEqual(log.level, logging.ERROR)

    def test_config(self):
        self.assertIn("log_level", config["DEFAULT"])
        self.assertGreaterEqual(N_JOBS, 1)
        self.assertGreaterEqual(CHUNK_SIZE, 1)


if __name__ == "__main__":
    unittest.main()
