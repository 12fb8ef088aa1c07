"""
Locates the client certificate for a request.
"""
import base64
import binascii
import logging
from typing import Any, Mapping, Optional, Union

from cryptography import x509

from .models import ClientCertificate

FORWARDED_CERT_HEADER = "X-ARR-ClientCert"

ConnectionCertificate = Union[ClientCertificate, x509.Certificate, str, bytes, None]


def _as_text(value):
    """Header values may arrive as bytes through a plain mapping."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return value


class CertificateResolver:
    """
    Resolve a client certificate from the connection, falling back to the
    forwarded certificate header.

    The connection slot wins when it carries anything. Otherwise the
    ``X-ARR-ClientCert`` header is read as base64 encoded DER. A malformed
    value in either place resolves to None, the same as no certificate.
    Ownership of the returned certificate passes to the caller.
    """

    def __init__(self, header_name: str = FORWARDED_CERT_HEADER):
        self.header_name = header_name
        self.logger = logging.getLogger(__name__)

    def resolve(self, connection_certificate: ConnectionCertificate,
                headers: Optional[Mapping[str, Any]]) -> Optional[ClientCertificate]:
        certificate = self._from_connection(connection_certificate)
        if certificate is not None:
            return certificate

        header_value = self._find_header(headers)
        if not header_value:
            return None

        return self._from_header(header_value)

    def _from_connection(self, value: ConnectionCertificate) -> Optional[ClientCertificate]:
        if value is None:
            return None

        if isinstance(value, ClientCertificate):
            return value

        if isinstance(value, x509.Certificate):
            return ClientCertificate(value)

        try:
            if isinstance(value, str):
                if not value.strip():
                    return None
                return ClientCertificate(
                    x509.load_pem_x509_certificate(value.strip().encode('ascii'))
                )

            if isinstance(value, (bytes, bytearray)):
                if not value:
                    return None
                return ClientCertificate(x509.load_der_x509_certificate(bytes(value)))
        except (ValueError, UnicodeError) as e:
            self.logger.warning(f"Ignoring malformed connection certificate: {e}")
            return None

        self.logger.warning(f"Unsupported connection certificate type: {type(value).__name__}")
        return None

    def _find_header(self, headers: Optional[Mapping[str, Any]]) -> Optional[str]:
        """Exact, case-insensitive lookup of the forwarded certificate header."""
        if not headers:
            return None

        wanted = self.header_name.lower()
        for key, value in headers.items():
            if isinstance(key, str) and key.lower() == wanted:
                if isinstance(value, (list, tuple)):
                    value = ",".join(str(_as_text(item)) for item in value)
                else:
                    value = _as_text(value)
                if not isinstance(value, str):
                    self.logger.warning(
                        f"Ignoring {self.header_name} header of type {type(value).__name__}"
                    )
                    return None
                return value
        return None

    def _from_header(self, header_value: str) -> Optional[ClientCertificate]:
        try:
            # Proxies may fold long values; base64 ignores embedded whitespace
            der_bytes = base64.b64decode("".join(header_value.split()), validate=True)
            return ClientCertificate(x509.load_der_x509_certificate(der_bytes))
        except (binascii.Error, ValueError, TypeError) as e:
            self.logger.warning(f"Ignoring malformed {self.header_name} header: {e}")
            return None
