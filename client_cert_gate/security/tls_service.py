"""
Server-side TLS context for running the gate over HTTPS.
"""
import os
import ssl
import logging

from ..models.config import Config


class TlsService:
    """Builds the SSL context used when the service terminates TLS itself."""

    def __init__(self, config: Config):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def is_configured(self) -> bool:
        """Whether a server certificate and key have been configured."""
        return bool(self.config.server_cert_path and self.config.server_key_path)

    def create_ssl_context(self) -> ssl.SSLContext:
        """
        Create an SSL context that asks clients for a certificate.

        Client certificates are optional at the handshake; the gate decides
        whether a request without one is admitted.

        Raises:
            ValueError: If no server certificate is configured
            FileNotFoundError: If a configured file does not exist
        """
        if not self.is_configured():
            raise ValueError("server_cert_path and server_key_path are required for HTTPS")

        self._require_file(self.config.server_cert_path)
        self._require_file(self.config.server_key_path)

        context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        context.load_cert_chain(
            certfile=self.config.server_cert_path,
            keyfile=self.config.server_key_path
        )

        if self.config.ca_cert_path:
            self._require_file(self.config.ca_cert_path)
            context.load_verify_locations(cafile=self.config.ca_cert_path)

        context.verify_mode = ssl.CERT_OPTIONAL
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        context.set_ciphers('ECDHE+AESGCM:ECDHE+CHACHA20:DHE+AESGCM:DHE+CHACHA20:!aNULL:!MD5:!DSS')

        self.logger.info("SSL context configured for client certificates")
        return context

    def _require_file(self, file_path: str):
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Certificate file not found: {file_path}")
