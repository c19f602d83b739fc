#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import sys
import os
# Add src to path for imports (needed when running test file directly)
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

import unittest
import tempfile
import logging
from util import mask_key, select_fields, set_log_level, setup_logger


class TestMaskKey(unittest.TestCase):
    def test_missing(self):
        self.assertEqual(mask_key(None), "(not configured)")
        self.assertEqual(mask_key(""), "(not configured)")

    def test_short_key_fully_masked(self):
        self.assertEqual(mask_key("abcd1234"), "***")

    def test_long_key(self):
        masked = mask_key("vmPUZE6mv9SD5VNHk4HlWFsOr6aKE2zvsw0MuIgwCIPy6utIco14y7Ju91duEh8A")
        self.assertEqual(masked, "vmPU...Eh8A")
        self.assertNotIn("SD5VNHk4", masked)


class TestSelectFields(unittest.TestCase):
    """Top-level field projection of tool results"""

    def setUp(self):
        self.ticker = {"symbol": "BTCUSDT", "lastPrice": "43000.00", "volume": "1234.5"}

    def test_no_fields(self):
        self.assertIs(select_fields(self.ticker, None), self.ticker)
        self.assertIs(select_fields(self.ticker, ""), self.ticker)
        self.assertIs(select_fields(self.ticker, " , "), self.ticker)

    def test_dict(self):
        self.assertEqual(select_fields(self.ticker, "symbol, lastPrice"), {"symbol": "BTCUSDT", "lastPrice": "43000.00"})

    def test_unknown_fields_ignored(self):
        self.assertEqual(select_fields(self.ticker, "symbol,nope"), {"symbol": "BTCUSDT"})

    def test_list_of_dicts(self):
        data = [dict(self.ticker), {"symbol": "ETHUSDT", "lastPrice": "2300.00"}]
        self.assertEqual(
            select_fields(data, "symbol"),
            [{"symbol": "BTCUSDT"}, {"symbol": "ETHUSDT"}],
        )

    def test_klines_unchanged(self):
        rows = [[1499040000000, "0.0163", "0.8000"]]
        self.assertEqual(select_fields(rows, "open"), rows)

    def test_scalar_unchanged(self):
        self.assertEqual(select_fields("ok", "symbol"), "ok")


class TestLoggerFunctions(unittest.TestCase):
    """Test logger-related functions"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.log_file = os.path.join(self.temp_dir.name, "test.log")

    def tearDown(self):
        for name in ("test_setup", "test_dup", "test_no_console"):
            test_logger = logging.getLogger(name)
            for handler in list(test_logger.handlers):
                handler.close()
                test_logger.removeHandler(handler)
        self.temp_dir.cleanup()

    def test_setup_logger_with_name(self):
        """Test setup_logger() with explicit name"""
        logger = setup_logger('test_setup', level='DEBUG', console=True, log_file=self.log_file)
        self.assertIsInstance(logger, logging.Logger)
        self.assertEqual(logger.name, 'test_setup')
        self.assertEqual(len(logger.handlers), 2)
        self.assertTrue(os.path.exists(self.log_file))

    def test_console_handler_writes_to_stderr(self):
        logger = setup_logger('test_setup', level='INFO', console=True, log_file=self.log_file)
        stream_handlers = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(stream_handlers), 1)
        self.assertIs(stream_handlers[0].stream, sys.stderr)

    def test_setup_logger_without_console(self):
        logger = setup_logger('test_no_console', level='INFO', console=False, log_file=self.log_file)
        self.assertEqual(len(logger.handlers), 1)
        self.assertIsInstance(logger.handlers[0], logging.FileHandler)

    def test_setup_logger_prevents_duplicate_handlers(self):
        """Test that setup_logger doesn't add duplicate handlers"""
        logger1 = setup_logger('test_dup', level='INFO', console=False, log_file=self.log_file)
        handler_count_1 = len(logger1.handlers)

        # Second call should return same logger without adding handlers
        logger2 = setup_logger('test_dup', level='INFO', console=False, log_file=self.log_file)
        handler_count_2 = len(logger2.handlers)

        self.assertEqual(handler_count_1, handler_count_2)

    def test_set_log_level(self):
        """Test set_log_level() changes log level"""
        root_logger = logging.getLogger()
        original_level = root_logger.level

        try:
            self.assertEqual(set_log_level('DEBUG'), logging.DEBUG)
            self.assertEqual(root_logger.level, logging.DEBUG)

            set_log_level('warning')
            self.assertEqual(root_logger.level, logging.WARNING)
        finally:
            root_logger.setLevel(original_level)

    def test_set_log_level_syslog_names(self):
        root_logger = logging.getLogger()
        original_level = root_logger.level

        try:
            self.assertEqual(set_log_level('notice'), logging.INFO)
            self.assertEqual(set_log_level('emergency'), logging.CRITICAL)
        finally:
            root_logger.setLevel(original_level)

    def test_set_log_level_unknown(self):
        with self.assertRaises(ValueError):
            set_log_level('verbose')


if __name__ == '__main__':
    unittest.main()
