"""Cross-cutting building blocks shared by every layer of the blog API.

- **config**: Settings loaded from the environment and ``.env``
- **constants**: Pagination limits, excerpt length, redaction marker
- **context**: Correlation and request ids for the request being served
- **exceptions**: Business error hierarchy raised by the entity services
- **error_context**: Redaction of sensitive values before logging
- **logging**: Loguru setup and formatters
- **observability**: OpenTelemetry tracing
- **types**: JSON type aliases
"""
