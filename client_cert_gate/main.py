"""
Main application entry point for the client certificate gate.
"""
import os
import sys
import logging
from typing import Optional

from .services.config_service import ConfigService
from .services.logging_service import LoggingService
from .app import GatewayFlaskApp


class ClientCertGateApplication:
    """Wires configuration, logging and the Flask app together."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the application.

        Args:
            config_path: Path to configuration file (optional)
        """
        self.config_path = config_path or self._get_default_config_path()
        self.logger = None
        self.config_service = None
        self.config = None
        self.logging_service = None
        self.flask_app = None

    def _get_default_config_path(self) -> str:
        """Get the default configuration file path."""
        possible_paths = [
            "config/default.properties",
            "config.properties",
            os.path.expanduser("~/.client_cert_gate/config.properties"),
            "/etc/client_cert_gate/config.properties"
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        return possible_paths[0]

    def initialize(self) -> bool:
        """
        Initialize all application components.

        Returns:
            True if initialization successful, False otherwise
        """
        try:
            self._setup_bootstrap_logging()

            if not self._load_configuration():
                return False

            self.logging_service = LoggingService(self.config)

            self.flask_app = GatewayFlaskApp(self.config_service, self.logging_service)

            self.logger.info("Client certificate gate initialized successfully")
            return True

        except Exception as e:
            if self.logger:
                self.logger.error(f"Failed to initialize application: {str(e)}")
            else:
                print(f"Failed to initialize application: {str(e)}")
            return False

    def _setup_bootstrap_logging(self):
        """Console logging until the configured handlers are installed."""
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[logging.StreamHandler(sys.stdout)]
        )
        self.logger = logging.getLogger(__name__)

    def _load_configuration(self) -> bool:
        """Load application configuration."""
        try:
            self.logger.info(f"Loading configuration from {self.config_path}")
            self.config_service = ConfigService()
            self.config = self.config_service.load_config(self.config_path)
            self.logger.info(
                f"Configuration loaded: ssl_enabled={self.config.ssl_enabled}, "
                f"expected CN '{self.config.validate_to_cn}'"
            )
            return True
        except FileNotFoundError as e:
            self.logger.error(f"Configuration file not found: {e}")
            self.logger.info("Create one with --create-config")
            return False
        except ValueError as e:
            self.logger.error(f"Invalid configuration: {e}")
            return False

    def run(self, host: str = '0.0.0.0', port: Optional[int] = None, debug: bool = False):
        """Run the application server."""
        if not self.flask_app:
            raise RuntimeError("Application not initialized. Call initialize() first.")

        self.flask_app.run(host=host, port=port, debug=debug)

    def get_status(self) -> dict:
        """Get application status information."""
        return {
            'config_path': self.config_path,
            'ssl_enabled': self.config.ssl_enabled if self.config else None,
            'validate_to_cn': self.config.validate_to_cn if self.config else None,
            'expose_validation_errors': self.config.expose_validation_errors if self.config else None,
            'https': self.flask_app.tls_service.is_configured() if self.flask_app else False
        }


def main():
    """Main entry point for the application."""
    import argparse

    parser = argparse.ArgumentParser(description='Client Certificate Gate')
    parser.add_argument('--config', '-c', help='Configuration file path')
    parser.add_argument('--host', default='0.0.0.0', help='Host to bind to (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, help='Port to bind to (uses config if not specified)')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')
    parser.add_argument('--check-config', action='store_true', help='Check configuration and exit')
    parser.add_argument('--create-config', metavar='PATH', help='Write an example configuration file and exit')

    args = parser.parse_args()

    if args.create_config:
        ConfigService().create_default_config_file(args.create_config)
        print(f"Created configuration file: {args.create_config}")
        sys.exit(0)

    app = ClientCertGateApplication(config_path=args.config)

    if not app.initialize():
        print("Failed to initialize application")
        sys.exit(1)

    if args.check_config:
        print("Configuration check passed")
        status = app.get_status()
        print(f"Config path: {status['config_path']}")
        print(f"SSL enabled: {status['ssl_enabled']}")
        print(f"Expected CN: {status['validate_to_cn']}")
        print(f"HTTPS: {status['https']}")
        sys.exit(0)

    try:
        app.run(host=args.host, port=args.port, debug=args.debug)
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
    except Exception as e:
        print(f"Application error: {str(e)}")
        sys.exit(1)


if __name__ == '__main__':
    main()
