"""
Configuration data models for the client certificate gate.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Config:
    """Process-wide settings, loaded once at startup and never mutated."""

    # ClientCertValidationOptions
    validate_to_cn: str = ""
    expose_validation_errors: bool = True

    # HttpsOptions
    ssl_enabled: bool = False
    server_cert_path: str = ""
    server_key_path: str = ""
    ca_cert_path: Optional[str] = None

    # Application settings
    api_port: int = 5000
    log_level: str = "INFO"
    log_file_path: str = "logs/client_cert_gate.log"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_types()

    def _validate_types(self):
        """Ensure all configuration values have correct types."""
        if not isinstance(self.validate_to_cn, str):
            raise ValueError("validate_to_cn must be a string")

        if not isinstance(self.ssl_enabled, bool):
            raise ValueError("ssl_enabled must be a boolean")

        if not isinstance(self.expose_validation_errors, bool):
            raise ValueError("expose_validation_errors must be a boolean")

        if not isinstance(self.api_port, int) or not (1 <= self.api_port <= 65535):
            raise ValueError("api_port must be an integer between 1 and 65535")

        if self.log_level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError("log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL")

    @property
    def certificate_check_enabled(self) -> bool:
        """Whether client certificates are enforced for every request."""
        return self.ssl_enabled


@dataclass
class ConfigValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    severity: str = "error"  # error, warning

    def __str__(self):
        return f"{self.severity.upper()}: {self.field} - {self.message}"


@dataclass
class ConfigValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: list[ConfigValidationError]
    warnings: list[ConfigValidationError]

    def __post_init__(self):
        """Separate errors and warnings."""
        all_issues = self.errors + self.warnings
        self.errors = [e for e in all_issues if e.severity == "error"]
        self.warnings = [e for e in all_issues if e.severity == "warning"]

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def get_error_summary(self) -> str:
        """Get a formatted summary of all errors and warnings."""
        lines = []

        if self.errors:
            lines.append("Configuration Errors:")
            for error in self.errors:
                lines.append(f"  - {error}")

        if self.warnings:
            lines.append("Configuration Warnings:")
            for warning in self.warnings:
                lines.append(f"  - {warning}")

        return "\n".join(lines) if lines else "Configuration is valid"
