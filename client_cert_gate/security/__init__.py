"""
Security package for client certificate validation.
"""
from .models import ClientCertificate, GateAction, GateOutcome, ValidationResult
from .certificate_resolver import CertificateResolver, FORWARDED_CERT_HEADER
from .certificate_validator import CertificateValidator
from .gate import CertificateGate
from .auth_middleware import ClientCertificateMiddleware, setup_client_cert_validation
from .tls_service import TlsService

__all__ = [
    'ClientCertificate',
    'GateAction',
    'GateOutcome',
    'ValidationResult',
    'CertificateResolver',
    'FORWARDED_CERT_HEADER',
    'CertificateValidator',
    'CertificateGate',
    'ClientCertificateMiddleware',
    'setup_client_cert_validation',
    'TlsService'
]
