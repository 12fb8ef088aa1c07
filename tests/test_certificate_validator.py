"""
Tests for CertificateValidator.
"""
import unittest
from unittest.mock import Mock, PropertyMock

from client_cert_gate.security.certificate_validator import CertificateValidator
from client_cert_gate.security.models import ClientCertificate

from certificate_helpers import create_cert, create_self_signed


class TestCertificateValidator(unittest.TestCase):
    """Test cases for CertificateValidator."""

    def setUp(self):
        self.validator = CertificateValidator("gateway-1")

    def _validate(self, x509_cert):
        with ClientCertificate(x509_cert) as certificate:
            return self.validator.validate(certificate)

    def test_matching_common_name(self):
        cert, _ = create_cert("gateway-1")

        result = self._validate(cert)

        self.assertTrue(result.is_valid)
        self.assertEqual(result.common_name, "gateway-1")
        self.assertIsNone(result.error_message)

    def test_common_name_comparison_ignores_case(self):
        for common_name in ("GATEWAY-1", "Gateway-1", "gAtEwAy-1"):
            with self.subTest(common_name=common_name):
                cert, _ = create_cert(common_name)
                self.assertTrue(self._validate(cert).is_valid)

    def test_mismatched_common_name(self):
        cert, _ = create_cert("gateway-2")

        result = self._validate(cert)

        self.assertFalse(result.is_valid)
        self.assertEqual(result.common_name, "gateway-2")
        self.assertIsNone(result.error_message)

    def test_prefix_is_not_a_match(self):
        cert, _ = create_cert("gateway-10")

        self.assertFalse(self._validate(cert).is_valid)

    def test_missing_common_name(self):
        cert, _ = create_cert(common_name=None)

        result = self._validate(cert)

        self.assertFalse(result.is_valid)
        self.assertIsNone(result.common_name)
        self.assertIsNone(result.error_message)

    def test_empty_expected_common_name_never_matches(self):
        validator = CertificateValidator("")
        cert, _ = create_cert("gateway-1")

        with ClientCertificate(cert) as certificate:
            self.assertFalse(validator.validate(certificate).is_valid)

    def test_self_signed_rejected_even_with_matching_cn(self):
        cert, _ = create_self_signed("gateway-1")

        result = self._validate(cert)

        self.assertFalse(result.is_valid)
        self.assertEqual(result.common_name, "gateway-1")
        self.assertIsNone(result.error_message)

    def test_error_reading_common_name_is_reported(self):
        certificate = Mock(spec=ClientCertificate)
        type(certificate).common_name = PropertyMock(side_effect=ValueError("malformed subject"))

        with self.assertLogs('client_cert_gate.security.certificate_validator', level='ERROR'):
            result = self.validator.validate(certificate)

        self.assertFalse(result.is_valid)
        self.assertEqual(result.error_message, "malformed subject")

    def test_error_reading_names_is_reported(self):
        certificate = Mock(spec=ClientCertificate)
        type(certificate).common_name = PropertyMock(return_value="gateway-1")
        type(certificate).subject_raw = PropertyMock(side_effect=ValueError("bad subject encoding"))

        with self.assertLogs('client_cert_gate.security.certificate_validator', level='ERROR'):
            result = self.validator.validate(certificate)

        self.assertFalse(result.is_valid)
        self.assertEqual(result.common_name, "gateway-1")
        self.assertEqual(result.error_message, "bad subject encoding")

    def test_released_certificate_is_an_error(self):
        cert, _ = create_cert("gateway-1")
        certificate = ClientCertificate(cert)
        certificate.release()

        with self.assertLogs('client_cert_gate.security.certificate_validator', level='ERROR'):
            result = self.validator.validate(certificate)

        self.assertFalse(result.is_valid)
        self.assertIn("released", result.error_message)


class TestClientCertificate(unittest.TestCase):
    """Test cases for the ClientCertificate wrapper."""

    def test_raw_names(self):
        cert, _ = create_cert("gateway-1")
        certificate = ClientCertificate(cert)

        self.assertEqual(certificate.subject_raw, cert.subject.public_bytes())
        self.assertEqual(certificate.issuer_raw, cert.issuer.public_bytes())
        self.assertNotEqual(certificate.subject_raw, certificate.issuer_raw)

    def test_release_is_idempotent(self):
        cert, _ = create_cert("gateway-1")
        on_release = Mock()
        certificate = ClientCertificate(cert, on_release=on_release)

        certificate.release()
        certificate.release()

        self.assertTrue(certificate.released)
        on_release.assert_called_once_with(certificate)

    def test_context_manager_releases(self):
        cert, _ = create_cert("gateway-1")
        on_release = Mock()

        with self.assertRaises(RuntimeError):
            with ClientCertificate(cert, on_release=on_release):
                raise RuntimeError("boom")

        on_release.assert_called_once()


if __name__ == '__main__':
    unittest.main()
