"""Blog API - users and blog posts with validated nested post metadata.

Architecture Overview:
- **API Layer**: FastAPI routes, response envelopes, middleware and the
  mapping of business errors to HTTP responses
- **Core Layer**: Configuration, logging, tracing, request context and the
  business error hierarchy
- **Domain Layer**: Request DTOs, the post metadata document and pagination
- **Services**: Entity operations behind the endpoints
- **Infrastructure Layer**: SQLAlchemy models, sessions and repositories
"""
