"""
Configuration service for loading and validating gate settings.
"""
import os
import configparser
from typing import Optional, Dict, Any
import logging

from ..models.config import Config, ConfigValidationError, ConfigValidationResult


class ConfigService:
    """Service for loading and validating application configuration."""

    # Accepted keys, namespaced by lower-cased section name, and their Config fields
    CONFIG_MAPPING = {
        # ClientCertValidationOptions
        "clientcertvalidationoptions.validate_to_cn": ("validate_to_cn", str),
        "clientcertvalidationoptions.validatetocn": ("validate_to_cn", str),
        "validate_to_cn": ("validate_to_cn", str),
        "clientcertvalidationoptions.expose_validation_errors": ("expose_validation_errors", bool),
        "expose_validation_errors": ("expose_validation_errors", bool),

        # HttpsOptions
        "httpsoptions.ssl_enabled": ("ssl_enabled", bool),
        "httpsoptions.sslenabled": ("ssl_enabled", bool),
        "ssl_enabled": ("ssl_enabled", bool),
        "httpsoptions.server_cert_path": ("server_cert_path", str),
        "server_cert_path": ("server_cert_path", str),
        "httpsoptions.server_key_path": ("server_key_path", str),
        "server_key_path": ("server_key_path", str),
        "httpsoptions.ca_cert_path": ("ca_cert_path", str),
        "ca_cert_path": ("ca_cert_path", str),

        # Application settings
        "app.api_port": ("api_port", int),
        "api_port": ("api_port", int),
        "app.log_level": ("log_level", str),
        "log_level": ("log_level", str),
        "app.log_file_path": ("log_file_path", str),
        "log_file_path": ("log_file_path", str),
    }

    def __init__(self, config_path: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self._config = None
        if config_path:
            self._config = self.load_config(config_path)

    def get_config(self) -> Config:
        """
        Get the loaded configuration.

        Returns:
            Config object

        Raises:
            ValueError: If no configuration has been loaded
        """
        if self._config is None:
            raise ValueError("No configuration loaded. Call load_config() first.")
        return self._config

    def load_config(self, config_path: str) -> Config:
        """
        Load configuration from a property file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid or has validation errors
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        config_data = self._load_config_file(config_path)
        config = self._create_config_from_data(config_data)

        validation_result = self.validate_config(config)

        if validation_result.has_errors():
            error_summary = validation_result.get_error_summary()
            raise ValueError(f"Configuration validation failed:\n{error_summary}")

        if validation_result.has_warnings():
            warning_summary = validation_result.get_error_summary()
            self.logger.warning(f"Configuration warnings:\n{warning_summary}")

        self._config = config
        return config

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """Load configuration data from file."""
        config_parser = configparser.ConfigParser()

        try:
            config_parser.read(config_path)
        except configparser.Error as e:
            raise ValueError(f"Failed to parse configuration file: {e}")

        # Flatten to "section.key"; section names are matched case-insensitively
        config_data = {}
        for section in config_parser.sections():
            for key, value in config_parser.items(section):
                config_data[f"{section.lower()}.{key}"] = value

        for key, value in config_parser.defaults().items():
            if key not in config_data:
                config_data[key] = value

        return config_data

    def _create_config_from_data(self, config_data: Dict[str, Any]) -> Config:
        """Create Config object from configuration data."""
        config_kwargs = {}

        for config_key, raw_value in config_data.items():
            if config_key not in self.CONFIG_MAPPING:
                continue

            field_name, field_type = self.CONFIG_MAPPING[config_key]
            try:
                if field_type == bool:
                    value = self._parse_bool(raw_value)
                elif field_type == int:
                    value = int(raw_value)
                else:
                    value = str(raw_value).strip() if raw_value is not None else ""
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid value for {config_key}: {raw_value} ({e})")

            config_kwargs[field_name] = value

        if not config_kwargs.get("ca_cert_path"):
            config_kwargs["ca_cert_path"] = None

        return Config(**config_kwargs)

    def _parse_bool(self, value: Any) -> bool:
        """Parse boolean value from string."""
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "1", "on", "enabled")
        return bool(value)

    def validate_config(self, config: Config) -> ConfigValidationResult:
        """
        Validate configuration settings.

        Args:
            config: Configuration object to validate

        Returns:
            ConfigValidationResult with validation results
        """
        errors = []
        warnings = []

        if config.ssl_enabled:
            if not config.validate_to_cn.strip():
                errors.append(ConfigValidationError(
                    "validate_to_cn",
                    "Expected client certificate common name is required when SSL is enabled"
                ))

            if config.expose_validation_errors:
                warnings.append(ConfigValidationError(
                    "expose_validation_errors",
                    "Certificate validation error messages are returned to clients",
                    "warning"
                ))
        else:
            warnings.append(ConfigValidationError(
                "ssl_enabled",
                "Client certificate validation is disabled; all requests will be admitted",
                "warning"
            ))

        # Server TLS material is optional, but must exist once named
        tls_files = [
            ("server_cert_path", config.server_cert_path),
            ("server_key_path", config.server_key_path),
            ("ca_cert_path", config.ca_cert_path)
        ]

        for field_name, path in tls_files:
            if path and not os.path.exists(path):
                errors.append(ConfigValidationError(
                    field_name,
                    f"Certificate file not found: {path}"
                ))

        if bool(config.server_cert_path) != bool(config.server_key_path):
            errors.append(ConfigValidationError(
                "server_key_path",
                "server_cert_path and server_key_path must be set together"
            ))

        if config.log_file_path:
            log_dir = os.path.dirname(config.log_file_path)
            if log_dir and not os.path.exists(log_dir):
                warnings.append(ConfigValidationError(
                    "log_file_path",
                    f"Log directory does not exist: {log_dir}",
                    "warning"
                ))

        all_issues = errors + warnings
        return ConfigValidationResult(
            is_valid=len(errors) == 0,
            errors=all_issues,
            warnings=[]
        )

    def create_default_config_file(self, config_path: str) -> None:
        """
        Create a default configuration file with example settings.

        Args:
            config_path: Path where to create the config file
        """
        config_content = """# Client Certificate Gate Configuration File

[ClientCertValidationOptions]
validate_to_cn = gateway-1
expose_validation_errors = true

[HttpsOptions]
ssl_enabled = true
server_cert_path =
server_key_path =
ca_cert_path =

[app]
api_port = 5000
log_level = INFO
log_file_path = logs/client_cert_gate.log
"""

        config_dir = os.path.dirname(config_path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        with open(config_path, 'w') as f:
            f.write(config_content)

        self.logger.info(f"Created default configuration file: {config_path}")
