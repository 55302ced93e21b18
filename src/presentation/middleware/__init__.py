"""
Middleware layer for the helper documents service.

Request size limits, request IDs, security headers and request timeouts.
"""
