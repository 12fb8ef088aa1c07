"""
WSGI middleware enforcing client certificate validation.
"""
import logging
from typing import Optional

from flask import Flask, g, request
from werkzeug.datastructures import EnvironHeaders
from werkzeug.wrappers import Response

from ..models.config import Config
from .gate import CertificateGate
from .models import GateOutcome

CONNECTION_CERT_ENVIRON_KEY = 'SSL_CLIENT_CERT'
COMMON_NAME_ENVIRON_KEY = 'client_cert.common_name'


def add_security_headers(response, hsts: bool = True):
    """Set the security headers shared by admitted and rejected responses."""
    if hsts:
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Referrer-Policy'] = 'no-referrer'
    response.headers.pop('Server', None)

    return response


class ClientCertificateMiddleware:
    """Middleware that admits or rejects each request based on its client certificate."""

    def __init__(self, app: Flask, gate: CertificateGate, logging_service=None):
        """Initialize the middleware and wrap the Flask app."""
        self.app = app
        self.gate = gate
        self.logging_service = logging_service
        self.logger = logging.getLogger(__name__)

        self.wsgi_app = app.wsgi_app
        app.wsgi_app = self

    def __call__(self, environ, start_response):
        """WSGI application call."""
        environ[COMMON_NAME_ENVIRON_KEY] = None

        outcome = self.gate.evaluate(
            environ.get(CONNECTION_CERT_ENVIRON_KEY),
            EnvironHeaders(environ)
        )

        if outcome.is_forward:
            environ[COMMON_NAME_ENVIRON_KEY] = outcome.common_name
            if self.gate.enabled:
                self.logger.debug(f"Client certificate accepted: {outcome.common_name}")
            return self.wsgi_app(environ, start_response)

        self._record_rejection(environ, outcome)
        response = Response(outcome.body, status=outcome.status_code, mimetype='text/plain')
        # Rejections never reach Flask, so its after_request hooks do not run
        add_security_headers(response, hsts=self.gate.enabled)
        return response(environ, start_response)

    def _record_rejection(self, environ, outcome: GateOutcome):
        path = environ.get('PATH_INFO', '')
        self.logger.warning(
            f"Rejected request to {path}: {outcome.reason}",
            extra={
                'extra_data': {
                    'reason': outcome.reason,
                    'status_code': outcome.status_code,
                    'common_name': outcome.common_name,
                    'path': path,
                    'remote_addr': environ.get('REMOTE_ADDR')
                }
            }
        )

        if self.logging_service:
            self.logging_service.track_rejection(
                outcome.reason,
                outcome.status_code,
                common_name=outcome.common_name,
                error_message=outcome.body or None
            )


def setup_client_cert_validation(app: Flask, config: Config,
                                 logging_service=None,
                                 gate: Optional[CertificateGate] = None) -> Flask:
    """Install client certificate validation on a Flask app."""

    ClientCertificateMiddleware(app, gate or CertificateGate(config), logging_service)

    @app.before_request
    def expose_client_identity():
        """Make the admitted certificate CN available to views."""
        g.client_cn = request.environ.get(COMMON_NAME_ENVIRON_KEY)

    return app
