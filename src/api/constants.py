"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Error labels returned in the ``error`` field of every error body
NOT_FOUND_LABEL = "Resource not found"
BAD_REQUEST_LABEL = "Bad request"
VALIDATION_FAILED_LABEL = "Validation failed"
CONFLICT_LABEL = "Conflict"
INTERNAL_ERROR_LABEL = "Internal server error"
DATABASE_ERROR_LABEL = "Database error"
