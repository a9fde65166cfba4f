import json
import logging
import unittest
from unittest.mock import patch

from typer.testing import CliRunner

from ssfs.cli import app as cli_app
from ssfs.daemon.storage import InMemoryDocumentStore
from ssfs.daemon.utils.config_loader import Settings
from ssfs.daemon.utils.logging_config import JSONFormatter, StructuredLogger, set_debug_logs


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


class StructuredLoggerTests(unittest.TestCase):
    def setUp(self):
        self.log = StructuredLogger("tests")
        self.capture = _Capture()
        self.log.logger.addHandler(self.capture)
        self.log.logger.setLevel(logging.DEBUG)

    def tearDown(self):
        self.log.logger.removeHandler(self.capture)
        set_debug_logs(False)

    def test_debug_is_gated(self):
        set_debug_logs(False)
        self.log.debug("hidden")
        set_debug_logs(True)
        self.log.debug("shown", account_id="M1")

        self.assertEqual([r.getMessage() for r in self.capture.records], ["shown"])

    def test_fields_are_merged_into_json(self):
        self.log.info("Quota debited", account_id="M1", remaining_quota=4)
        line = json.loads(JSONFormatter().format(self.capture.records[0]))

        self.assertEqual(line["message"], "Quota debited")
        self.assertEqual(line["account_id"], "M1")
        self.assertEqual(line["remaining_quota"], 4)
        self.assertEqual(line["level"], "INFO")


class CliTests(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()

    def test_config_show(self):
        settings = Settings(backend="memory", bucket_name="cli-bucket")
        with patch("ssfs.cli.account_cmds.config_loader.get_settings", return_value=settings):
            result = self.runner.invoke(cli_app, ["config", "show"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("cli-bucket", result.output)

    def test_account_show_unknown(self):
        settings = Settings(backend="memory")
        with patch("ssfs.cli.account_cmds.config_loader.get_settings", return_value=settings):
            result = self.runner.invoke(cli_app, ["account", "show", "M404"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("ID not found", result.output)

    def _show_account(self, munchkin_id):
        settings = Settings(backend="memory")
        documents = InMemoryDocumentStore(
            {
                "subscriptions": {
                    "M1": {"quota": 10, "ssfs_account_api_key": "k-1"},
                    "M2": {"quota": 5},
                }
            }
        )
        with patch("ssfs.cli.account_cmds.config_loader.get_settings", return_value=settings), \
                patch("ssfs.cli.account_cmds.build_stores", return_value=(documents, None)):
            return self.runner.invoke(cli_app, ["account", "show", munchkin_id])

    def test_account_show_with_key(self):
        result = self._show_account("M1")

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Account M1", result.output)
        self.assertIn("10", result.output)
        self.assertIn("5", result.output)
        self.assertIn("set", result.output)
        self.assertNotIn("missing", result.output)

    def test_account_show_without_key(self):
        result = self._show_account("M2")

        self.assertEqual(result.exit_code, 0)
        self.assertIn("2.5", result.output)
        self.assertIn("missing", result.output)


if __name__ == "__main__":
    unittest.main()
