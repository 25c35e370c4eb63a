# Middleware package init
"""
Inkpress Backend - Middleware Package
======================================

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: reject abusive clients before any processing
    2. Request ID: correlation ID for logs and error bodies
    3. Logging: method, path, status and duration tagged with the request ID

    Responses pass back through the chain in reverse.
"""
