from enum import StrEnum


class IdentityKind(StrEnum):
    SIGNING = "signing"
    TLS = "tls"


class IdentityStatus(StrEnum):
    """All possible states of a single identity resolution."""

    UNCHECKED = "unchecked"
    PRESENT = "present"
    MISSING = "missing"
    PROMPTED = "prompted"
    GENERATING = "generating"
    READY = "ready"  # Terminal state
    DECLINED = "declined"  # Terminal state
    FAILED = "failed"  # Terminal state


class IdentityEvent(StrEnum):
    """All possible events that trigger resolution transitions."""

    MATERIAL_FOUND = "material_found"
    MATERIAL_MISSING = "material_missing"
    KEY_LOADED = "key_loaded"
    KEY_REJECTED = "key_rejected"
    OPERATOR_PROMPTED = "operator_prompted"
    CONFIRMATION_UNAVAILABLE = "confirmation_unavailable"
    OPERATOR_DECLINED = "operator_declined"
    OPERATOR_CONFIRMED = "operator_confirmed"
    ISSUANCE_COMPLETED = "issuance_completed"
    ISSUANCE_FAILED = "issuance_failed"
