"""Domain errors."""

from enum import Enum


class InvalidServingSize(ValueError):
    """Raised when a serving size is not a positive number of grams."""

    def __init__(self, grams: int) -> None:
        super().__init__(f"Serving size must be positive, got {grams}g")
        self.grams = grams


class LookupErrorKind(Enum):
    """Reasons a barcode lookup can fail."""

    NOT_FOUND = "not_found"
    NETWORK_FAILURE = "network_failure"
    MALFORMED_RESPONSE = "malformed_response"


class LookupFailed(Exception):
    """Raised by lookup gateways when no usable product data is available."""

    def __init__(self, barcode: str, kind: LookupErrorKind, detail: str = "") -> None:
        message = f"Lookup failed for barcode={barcode}: {kind.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.barcode = barcode
        self.kind = kind
