"""
Security models for client certificate validation.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from cryptography import x509
from cryptography.x509.oid import NameOID


class ClientCertificate:
    """
    A resolved client certificate owned by a single request.

    The wrapped certificate is released exactly once, either explicitly
    through release() or by leaving a ``with`` block.
    """

    def __init__(self, certificate: x509.Certificate,
                 on_release: Optional[Callable[["ClientCertificate"], None]] = None):
        self._certificate = certificate
        self._on_release = on_release
        self._released = False

    @property
    def certificate(self) -> x509.Certificate:
        if self._released:
            raise ValueError("Client certificate has already been released")
        return self._certificate

    @property
    def common_name(self) -> Optional[str]:
        """Subject common name, or None when the subject has no CN."""
        attributes = self.certificate.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
        if not attributes:
            return None
        value = attributes[0].value
        if isinstance(value, bytes):
            value = value.decode('utf-8')
        return value

    @property
    def subject_raw(self) -> bytes:
        """DER encoding of the subject distinguished name."""
        return self.certificate.subject.public_bytes()

    @property
    def issuer_raw(self) -> bytes:
        """DER encoding of the issuer distinguished name."""
        return self.certificate.issuer.public_bytes()

    @property
    def released(self) -> bool:
        return self._released

    def release(self):
        """Release the certificate. Calling this more than once has no effect."""
        if self._released:
            return
        self._released = True
        self._certificate = None
        if self._on_release is not None:
            self._on_release(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release()
        return False

    def __repr__(self):
        state = "released" if self._released else "held"
        return f"<ClientCertificate {state}>"


@dataclass
class ValidationResult:
    """Result of checking a client certificate against the expected identity."""
    is_valid: bool
    common_name: Optional[str]
    error_message: Optional[str] = None


class GateAction(Enum):
    FORWARD = "forward"
    REJECT = "reject"


# Rejection reasons
REASON_NO_CERTIFICATE = "no_certificate"
REASON_IDENTITY_MISMATCH = "identity_mismatch"
REASON_VALIDATION_ERROR = "validation_error"


@dataclass(frozen=True)
class GateOutcome:
    """Per-request decision: forward downstream or reject with a status."""
    action: GateAction
    status_code: Optional[int] = None
    body: str = ""
    common_name: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def forward(cls, common_name: Optional[str] = None) -> "GateOutcome":
        return cls(action=GateAction.FORWARD, common_name=common_name)

    @classmethod
    def reject(cls, status_code: int = 403, body: str = "",
               reason: Optional[str] = None,
               common_name: Optional[str] = None) -> "GateOutcome":
        return cls(
            action=GateAction.REJECT,
            status_code=status_code,
            body=body,
            reason=reason,
            common_name=common_name
        )

    @property
    def is_forward(self) -> bool:
        return self.action is GateAction.FORWARD

    @property
    def is_reject(self) -> bool:
        return self.action is GateAction.REJECT
