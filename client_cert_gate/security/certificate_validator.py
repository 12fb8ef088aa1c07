"""
Identity checks applied to a resolved client certificate.
"""
import logging

from .models import ClientCertificate, ValidationResult


class CertificateValidator:
    """Checks a client certificate against the expected common name."""

    def __init__(self, expected_common_name: str):
        self.expected_common_name = expected_common_name
        self.logger = logging.getLogger(__name__)

    def validate(self, certificate: ClientCertificate) -> ValidationResult:
        """
        Validate a certificate.

        The certificate is valid when its subject CN is non-empty, matches the
        expected CN ignoring case, and its subject differs from its issuer.
        Errors raised while reading the certificate are reported through
        ``error_message`` instead of propagating.
        """
        common_name = None
        try:
            common_name = certificate.common_name

            if not common_name:
                return ValidationResult(is_valid=False, common_name=common_name)

            if not self.matches_expected(common_name):
                self.logger.info(f"Client certificate CN '{common_name}' does not match expected CN")
                return ValidationResult(is_valid=False, common_name=common_name)

            if certificate.subject_raw == certificate.issuer_raw:
                self.logger.info(f"Rejecting self-signed client certificate for CN '{common_name}'")
                return ValidationResult(is_valid=False, common_name=common_name)

            return ValidationResult(is_valid=True, common_name=common_name)

        except Exception as e:
            self.logger.error(f"Client certificate validation failed: {e}", exc_info=True)
            return ValidationResult(
                is_valid=False,
                common_name=common_name,
                error_message=str(e)
            )

    def matches_expected(self, common_name: str) -> bool:
        """Case-insensitive, locale-independent CN comparison."""
        if self.expected_common_name is None:
            return False
        return common_name.casefold() == self.expected_common_name.casefold()
