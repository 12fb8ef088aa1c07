"""
Unit tests for ConfigService and Config models.
"""
import dataclasses
import os
import tempfile
import unittest

from client_cert_gate.models.config import Config, ConfigValidationError, ConfigValidationResult
from client_cert_gate.services.config_service import ConfigService


class TestConfig(unittest.TestCase):
    """Test cases for Config data model."""

    def test_config_default_values(self):
        config = Config()

        self.assertEqual(config.validate_to_cn, "")
        self.assertTrue(config.expose_validation_errors)
        self.assertFalse(config.ssl_enabled)
        self.assertFalse(config.certificate_check_enabled)
        self.assertEqual(config.server_cert_path, "")
        self.assertEqual(config.server_key_path, "")
        self.assertIsNone(config.ca_cert_path)
        self.assertEqual(config.api_port, 5000)
        self.assertEqual(config.log_level, "INFO")
        self.assertEqual(config.log_file_path, "logs/client_cert_gate.log")

    def test_config_is_immutable(self):
        config = Config(validate_to_cn="gateway-1")

        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.validate_to_cn = "someone-else"

    def test_config_type_validation(self):
        with self.assertRaises(ValueError) as cm:
            Config(api_port=0)
        self.assertIn("api_port must be an integer between 1 and 65535", str(cm.exception))

        with self.assertRaises(ValueError) as cm:
            Config(log_level="VERBOSE")
        self.assertIn("log_level must be one of", str(cm.exception))

        with self.assertRaises(ValueError) as cm:
            Config(ssl_enabled="yes")
        self.assertIn("ssl_enabled must be a boolean", str(cm.exception))

    def test_certificate_check_follows_ssl_enabled(self):
        self.assertTrue(Config(ssl_enabled=True).certificate_check_enabled)


class TestConfigValidationResult(unittest.TestCase):
    """Test cases for ConfigValidationResult."""

    def test_errors_and_warnings_are_separated(self):
        result = ConfigValidationResult(
            is_valid=False,
            errors=[
                ConfigValidationError("validate_to_cn", "missing"),
                ConfigValidationError("log_file_path", "no dir", "warning"),
            ],
            warnings=[]
        )

        self.assertTrue(result.has_errors())
        self.assertTrue(result.has_warnings())
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(len(result.warnings), 1)

        summary = result.get_error_summary()
        self.assertIn("ERROR: validate_to_cn - missing", summary)
        self.assertIn("WARNING: log_file_path - no dir", summary)

    def test_empty_summary(self):
        result = ConfigValidationResult(is_valid=True, errors=[], warnings=[])

        self.assertEqual(result.get_error_summary(), "Configuration is valid")


class TestConfigService(unittest.TestCase):
    """Test cases for ConfigService."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.config_path = os.path.join(self.temp_dir.name, "config.properties")
        self.service = ConfigService()

    def _write(self, content):
        with open(self.config_path, 'w') as f:
            f.write(content)

    def test_get_config_before_load(self):
        with self.assertRaises(ValueError):
            self.service.get_config()

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            self.service.load_config(os.path.join(self.temp_dir.name, "missing.properties"))

    def test_load_sectioned_config(self):
        self._write(f"""
[ClientCertValidationOptions]
validate_to_cn = gateway-1
expose_validation_errors = false

[HttpsOptions]
ssl_enabled = true

[app]
api_port = 8443
log_level = DEBUG
log_file_path = {self.temp_dir.name}/gate.log
""")

        config = self.service.load_config(self.config_path)

        self.assertEqual(config.validate_to_cn, "gateway-1")
        self.assertFalse(config.expose_validation_errors)
        self.assertTrue(config.ssl_enabled)
        self.assertEqual(config.api_port, 8443)
        self.assertEqual(config.log_level, "DEBUG")
        self.assertIsNone(config.ca_cert_path)
        self.assertIs(self.service.get_config(), config)

    def test_options_class_key_names_accepted(self):
        self._write("""
[clientcertvalidationoptions]
ValidateToCn = gateway-1

[HTTPSOPTIONS]
SslEnabled = yes
""")

        config = self.service.load_config(self.config_path)

        self.assertEqual(config.validate_to_cn, "gateway-1")
        self.assertTrue(config.ssl_enabled)

    def test_flat_keys(self):
        self._write("""
[DEFAULT]
validate_to_cn = gateway-1
ssl_enabled = on
""")

        config = self.service.load_config(self.config_path)

        self.assertEqual(config.validate_to_cn, "gateway-1")
        self.assertTrue(config.ssl_enabled)

    def test_missing_expected_cn_when_enabled(self):
        self._write("""
[HttpsOptions]
ssl_enabled = true
""")

        with self.assertRaises(ValueError) as cm:
            self.service.load_config(self.config_path)
        self.assertIn("validate_to_cn", str(cm.exception))

    def test_invalid_port(self):
        self._write("""
[app]
api_port = not-a-number
""")

        with self.assertRaises(ValueError) as cm:
            self.service.load_config(self.config_path)
        self.assertIn("Invalid value for app.api_port", str(cm.exception))

    def test_disabled_validation_warns(self):
        self._write(f"""
[HttpsOptions]
ssl_enabled = false

[app]
log_file_path = {self.temp_dir.name}/gate.log
""")

        with self.assertLogs('client_cert_gate.services.config_service', level='WARNING') as logs:
            config = self.service.load_config(self.config_path)

        self.assertFalse(config.ssl_enabled)
        self.assertIn("ssl_enabled", "\n".join(logs.output))

    def test_validate_missing_tls_files(self):
        config = Config(
            validate_to_cn="gateway-1",
            ssl_enabled=True,
            server_cert_path="/nonexistent/server.crt",
            server_key_path="/nonexistent/server.key"
        )

        result = self.service.validate_config(config)

        self.assertFalse(result.is_valid)
        fields = [e.field for e in result.errors]
        self.assertIn("server_cert_path", fields)
        self.assertIn("server_key_path", fields)

    def test_validate_cert_without_key(self):
        cert_path = os.path.join(self.temp_dir.name, "server.crt")
        open(cert_path, 'w').close()
        config = Config(validate_to_cn="gateway-1", ssl_enabled=True, server_cert_path=cert_path)

        result = self.service.validate_config(config)

        self.assertIn("server_key_path", [e.field for e in result.errors])

    def test_validate_exposure_warning(self):
        config = Config(validate_to_cn="gateway-1", ssl_enabled=True, log_file_path="gate.log")

        result = self.service.validate_config(config)

        self.assertTrue(result.is_valid)
        self.assertEqual([w.field for w in result.warnings], ["expose_validation_errors"])

    def test_create_default_config_file(self):
        path = os.path.join(self.temp_dir.name, "nested", "default.properties")

        self.service.create_default_config_file(path)
        config = self.service.load_config(path)

        self.assertEqual(config.validate_to_cn, "gateway-1")
        self.assertTrue(config.ssl_enabled)
        self.assertEqual(config.server_cert_path, "")


if __name__ == '__main__':
    unittest.main()
