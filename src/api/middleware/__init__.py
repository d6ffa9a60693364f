"""Middleware and exception handlers applied to every request.

Registration order in ``create_app`` (outermost first when serving):
1. SecurityHeadersMiddleware: hardening headers on every response
2. RequestContextMiddleware: correlation and request ids
3. RequestLoggingMiddleware: start, completion and slow request logs
Exception handlers sit inside all three and render every failure.
"""
