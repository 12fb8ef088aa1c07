"""
Flask application guarded by client certificate validation.
"""
from flask import Flask, jsonify, g
import logging
from typing import Optional
from datetime import datetime

from .security import setup_client_cert_validation, TlsService
from .security.auth_middleware import add_security_headers
from .services.config_service import ConfigService
from .services.logging_service import LoggingService


class GatewayFlaskApp:
    """Flask application fronted by the client certificate gate."""

    def __init__(self, config_service: ConfigService, logging_service: Optional[LoggingService] = None):
        """Initialize the Flask application."""
        self.app = Flask(__name__)
        self.config_service = config_service
        self.config = config_service.get_config()
        self.logging_service = logging_service
        self.tls_service = TlsService(self.config)
        self.logger = logging.getLogger(__name__)

        setup_client_cert_validation(self.app, self.config, self.logging_service)

        self._setup_routes()
        self._setup_error_handlers()
        self._setup_security_headers()

    def _setup_routes(self):
        """Set up API routes."""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            health_status = {
                'status': 'healthy',
                'service': 'client-cert-gate',
                'ssl_enabled': self.config.ssl_enabled,
                'client_cn': getattr(g, 'client_cn', None),
                'timestamp': datetime.now().isoformat()
            }

            if self.logging_service:
                health_status['logging'] = self.logging_service.get_health_status()
                health_status['rejections'] = self.logging_service.get_rejection_summary()

            return jsonify(health_status)

        @self.app.route('/api/identity', methods=['GET'])
        def get_identity():
            """Return the identity asserted by the admitted client certificate."""
            return jsonify({
                'client_cn': getattr(g, 'client_cn', None),
                'validated': self.config.ssl_enabled
            })

    def _setup_error_handlers(self):
        """Set up error handlers."""

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify({
                'error': 'Not found',
                'message': 'The requested endpoint does not exist'
            }), 404

        @self.app.errorhandler(405)
        def method_not_allowed(error):
            return jsonify({
                'error': 'Method not allowed',
                'message': 'The requested method is not allowed for this endpoint'
            }), 405

        @self.app.errorhandler(500)
        def internal_error(error):
            self.logger.error(f"Internal server error: {error}")
            return jsonify({
                'error': 'Internal server error',
                'message': 'An unexpected error occurred'
            }), 500

    def _setup_security_headers(self):
        """Set up security headers for all responses."""

        @self.app.after_request
        def apply_security_headers(response):
            return add_security_headers(response, hsts=self.config.ssl_enabled)

    def run(self, host: str = '0.0.0.0', port: Optional[int] = None, debug: bool = False):
        """Run the Flask development server, over HTTPS when a server certificate is configured."""
        if port is None:
            port = self.config.api_port

        if self.config.ssl_enabled and self.tls_service.is_configured():
            ssl_context = self.tls_service.create_ssl_context()
            self.logger.info(f"Starting server with client certificate validation on https://{host}:{port}")
            self.app.run(host=host, port=port, debug=debug, ssl_context=ssl_context)
        else:
            if self.config.ssl_enabled:
                self.logger.warning(
                    "No server certificate configured; serving plain HTTP and relying on "
                    "the forwarded certificate header"
                )
            else:
                self.logger.warning("Client certificate validation disabled - use for development only")
            self.app.run(host=host, port=port, debug=debug)

    def get_app(self) -> Flask:
        """Get the Flask application instance."""
        return self.app
