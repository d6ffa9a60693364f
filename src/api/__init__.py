"""HTTP layer of the blog API.

- **main**: Application factory and lifespan
- **routes**: Users, posts and service endpoints
- **dependencies**: Services and pagination injected into the routes
- **errors**: Transport errors and the mapping from business errors
- **validation**: Malformed-body detection and violation grouping
- **middleware**: Request context, logging, security headers, exception handlers
- **schemas**: Response envelopes and bodies
- **utils**: orjson response class
"""
