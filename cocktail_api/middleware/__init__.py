# Middleware package init
"""
Cocktail Catalog Backend: Middleware Package
==============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

    - Rate limit rejects over-budget clients before any other work.
    - Request ID is set before the access log line needs it.
    - The access log sees the final status code and the full duration.
"""
