# Middleware package init
"""
CloudMemo Backend - Middleware Package
========================================

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Logging] → [GZip] → Route Handler

    1. CORS outermost: preflight OPTIONS is answered before authentication
       and disallowed origins never receive Access-Control-* headers.
    2. Request ID: correlation ID for logs and error bodies.
    3. Logging: one access line per request, with the ID from step 2.
"""
