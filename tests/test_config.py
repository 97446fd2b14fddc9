"""
Configuration Tests
Tests loading from the environment and .env files, and validation
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from eml2html.utils.config import (
    Config,
    ConfigurationError,
    DecoderConfig,
    OutputConfig,
    SystemConfig
)
from eml2html.utils.security_validators import DEFAULT_MAX_MULTIPART_DEPTH


MISSING_ENV_FILE = "/nonexistent/eml2html/.env"


class TestConfigDefaults(unittest.TestCase):

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults_without_env_file(self):
        config = Config(MISSING_ENV_FILE)

        self.assertEqual(config.decoder, DecoderConfig())
        self.assertEqual(config.output, OutputConfig())
        self.assertEqual(config.system, SystemConfig())
        self.assertEqual(config.decoder.max_multipart_depth, DEFAULT_MAX_MULTIPART_DEPTH)
        self.assertEqual(config.decoder.header_charsets, [])
        self.assertTrue(config.validate())

    def test_dataclass_defaults(self):
        self.assertEqual(OutputConfig().dir_mode, 0o755)
        self.assertEqual(OutputConfig().file_mode, 0o660)
        self.assertTrue(OutputConfig().sanitize_filenames)
        self.assertEqual(SystemConfig().log_level, "WARNING")
        self.assertEqual(SystemConfig().log_format, "color")


class TestConfigFromEnvironment(unittest.TestCase):

    @patch.dict(os.environ, {
        "MAX_MULTIPART_DEPTH": "8",
        "HEADER_CHARSETS": "utf-8, iso-8859-1,,windows-1252",
        "SANITIZE_FILENAMES": "false",
        "OUTPUT_DIR_MODE": "700",
        "OUTPUT_FILE_MODE": "0o600",
        "LOG_LEVEL": "DEBUG",
        "LOG_FILE": "/tmp/eml2html.log",
        "LOG_FORMAT": " JSON ",
    }, clear=True)
    def test_all_variables(self):
        config = Config(MISSING_ENV_FILE)

        self.assertEqual(config.decoder.max_multipart_depth, 8)
        self.assertEqual(config.decoder.header_charsets,
                         ["utf-8", "iso-8859-1", "windows-1252"])
        self.assertFalse(config.output.sanitize_filenames)
        self.assertEqual(config.output.dir_mode, 0o700)
        self.assertEqual(config.output.file_mode, 0o600)
        self.assertEqual(config.system.log_level, "DEBUG")
        self.assertEqual(config.system.log_file, "/tmp/eml2html.log")
        self.assertEqual(config.system.log_format, "json")
        self.assertTrue(config.validate())

    @patch.dict(os.environ, {"SANITIZE_FILENAMES": "yes"}, clear=True)
    def test_bool_spellings(self):
        self.assertTrue(Config(MISSING_ENV_FILE).output.sanitize_filenames)

    @patch.dict(os.environ, {"MAX_MULTIPART_DEPTH": "deep"}, clear=True)
    def test_non_integer_depth(self):
        with self.assertRaises(ConfigurationError):
            Config(MISSING_ENV_FILE)

    @patch.dict(os.environ, {"OUTPUT_FILE_MODE": "rw-r--r--"}, clear=True)
    def test_non_octal_mode(self):
        with self.assertRaises(ConfigurationError):
            Config(MISSING_ENV_FILE)

    @patch.dict(os.environ, {"OUTPUT_DIR_MODE": "9"}, clear=True)
    def test_mode_digit_out_of_octal_range(self):
        with self.assertRaises(ConfigurationError):
            Config(MISSING_ENV_FILE)

    @patch.dict(os.environ, {"MAX_MULTIPART_DEPTH": ""}, clear=True)
    def test_empty_value_uses_default(self):
        config = Config(MISSING_ENV_FILE)
        self.assertEqual(config.decoder.max_multipart_depth, DEFAULT_MAX_MULTIPART_DEPTH)

    def test_configuration_error_is_value_error(self):
        self.assertTrue(issubclass(ConfigurationError, ValueError))


class TestConfigValidation(unittest.TestCase):

    @patch.dict(os.environ, {"MAX_MULTIPART_DEPTH": "0"}, clear=True)
    def test_depth_must_be_positive(self):
        with self.assertRaises(ConfigurationError):
            Config(MISSING_ENV_FILE).validate()

    @patch.dict(os.environ, {"MAX_MULTIPART_DEPTH": "201"}, clear=True)
    def test_depth_above_ceiling(self):
        with self.assertRaises(ConfigurationError) as ctx:
            Config(MISSING_ENV_FILE).validate()
        self.assertIn("at most 200", str(ctx.exception))

    @patch.dict(os.environ, {"MAX_MULTIPART_DEPTH": "200"}, clear=True)
    def test_depth_at_ceiling(self):
        self.assertTrue(Config(MISSING_ENV_FILE).validate())

    @patch.dict(os.environ, {"OUTPUT_DIR_MODE": "17777"}, clear=True)
    def test_mode_out_of_range(self):
        with self.assertRaises(ConfigurationError):
            Config(MISSING_ENV_FILE).validate()

    @patch.dict(os.environ, {"LOG_FORMAT": "xml"}, clear=True)
    def test_unknown_log_format(self):
        with self.assertRaises(ConfigurationError) as ctx:
            Config(MISSING_ENV_FILE).validate()
        self.assertIn("LOG_FORMAT", str(ctx.exception))


class TestEnvFile(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.env_file = Path(self.tmpdir.name) / ".env"
        self.env_file.write_text(
            "# decoder\n"
            "MAX_MULTIPART_DEPTH=12\n"
            "LOG_LEVEL=INFO\n"
        )

    def tearDown(self):
        self.tmpdir.cleanup()

    @patch.dict(os.environ, {}, clear=True)
    def test_values_read_from_file(self):
        config = Config(str(self.env_file))
        self.assertEqual(config.decoder.max_multipart_depth, 12)
        self.assertEqual(config.system.log_level, "INFO")

    @patch.dict(os.environ, {"LOG_LEVEL": "ERROR"}, clear=True)
    def test_environment_wins_over_file(self):
        config = Config(str(self.env_file))
        self.assertEqual(config.system.log_level, "ERROR")
        self.assertEqual(config.decoder.max_multipart_depth, 12)


if __name__ == '__main__':
    unittest.main()
