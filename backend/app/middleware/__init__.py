# Middleware package init
"""
Product API — Middleware Package
==================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: Generate or accept a correlation ID for logs and errors
    2. Logging: Log method, path, status and duration with that ID
    3. GZip / CORS: Provided by Starlette/FastAPI

The order is reversed for responses, so the request ID header is added
after the access log line has been written.
"""
