"""
MediRate Admin Backend — Middleware Package
=============================================

What:  Cross-cutting concerns applied to every request.

Middleware chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

    Rate limiting rejects before anything else runs. The request ID is set
    before the access log line is written, so every line carries it.
"""
