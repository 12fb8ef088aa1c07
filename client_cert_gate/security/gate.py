"""
Per-request admit/reject decision for client certificates.
"""
import logging
from typing import Any, Mapping, Optional

from ..models.config import Config
from .certificate_resolver import CertificateResolver, ConnectionCertificate
from .certificate_validator import CertificateValidator
from .models import (
    GateOutcome,
    REASON_IDENTITY_MISMATCH,
    REASON_NO_CERTIFICATE,
    REASON_VALIDATION_ERROR,
)

REJECT_STATUS = 403


class CertificateGate:
    """Combines certificate resolution and validation into a GateOutcome."""

    def __init__(self, config: Config,
                 resolver: Optional[CertificateResolver] = None,
                 validator: Optional[CertificateValidator] = None):
        self.config = config
        self.resolver = resolver or CertificateResolver()
        self.validator = validator or CertificateValidator(config.validate_to_cn)
        self.logger = logging.getLogger(__name__)

    @property
    def enabled(self) -> bool:
        return self.config.certificate_check_enabled

    def evaluate(self, connection_certificate: ConnectionCertificate,
                 headers: Optional[Mapping[str, Any]]) -> GateOutcome:
        """
        Decide whether a request may continue down the pipeline.

        Args:
            connection_certificate: Certificate supplied by the connection, if any
            headers: Request headers, consulted for the forwarded certificate

        Returns:
            GateOutcome.forward() or a 403 GateOutcome.reject()
        """
        if not self.enabled:
            return GateOutcome.forward()

        certificate = self.resolver.resolve(connection_certificate, headers)
        if certificate is None:
            return GateOutcome.reject(REJECT_STATUS, reason=REASON_NO_CERTIFICATE)

        with certificate:
            result = self.validator.validate(certificate)

        if result.error_message is not None:
            body = result.error_message if self.config.expose_validation_errors else ""
            return GateOutcome.reject(
                REJECT_STATUS,
                body=body,
                reason=REASON_VALIDATION_ERROR,
                common_name=result.common_name
            )

        if result.is_valid:
            return GateOutcome.forward(common_name=result.common_name)

        return GateOutcome.reject(
            REJECT_STATUS,
            reason=REASON_IDENTITY_MISMATCH,
            common_name=result.common_name
        )
