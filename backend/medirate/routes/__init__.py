"""
MediRate Admin Backend — API Routes Package
=============================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - admin.py:        DELETE /api/admin/delete-*          (admin)
    - documents.py:    GET    /api/documents                (any user)
                       GET    /api/documents/download       (any user)
                       POST   /api/documents/*              (admin)
    - users.py:        POST   /api/update-user-role
                       GET    /api/user-role, /api/landing-redirect
    - contact.py:      *      /api/send-email               (public, POST only)
    - diagnostics.py:  POST   /api/test-email-verification  (admin)
                       GET    /api/stripe/test              (admin)
    - health.py:       GET    /health

Routes are thin: authenticate through a dependency, call one service method,
return its result. Failures surface as exceptions and are mapped to status
codes by the handlers in main.py.
"""
