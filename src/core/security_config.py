"""What may appear in logs and error responses."""

# Substrings of field names whose values are redacted from structured logs.
# Customer and driver names are not listed: they appear in every recognition
# log line and are needed to debug extraction.
SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "secret",
        "token",
        "authorization",
        "api_key",
        "x-api-key",
        "bearer",
        "cookie",
        "phone",
        "license_plate",
        "licenseplate",
        "address",
    }
)

_ERROR_FIELDS_PRODUCTION: frozenset[str] = frozenset({"correlation_id", "type"})
_ERROR_FIELDS_DEBUG: frozenset[str] = _ERROR_FIELDS_PRODUCTION | {
    "details",
    "traceback",
    "exception_type",
    "validation_errors",
}


def get_allowed_error_fields(environment: str) -> set[str]:
    """Error body keys that may be returned in ``environment``."""
    if environment == "production":
        return set(_ERROR_FIELDS_PRODUCTION)
    return set(_ERROR_FIELDS_DEBUG)


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_KEYS)
