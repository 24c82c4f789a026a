"""
MediRate Admin Backend — Services Layer
=========================================

What:  One service per external collaborator or resource family. Routes call
       services; services talk to Postgres, the blob store, Drive, SMTP and
       Stripe, and translate their failures into medirate.exceptions.

Service Inventory:
    - RecordService:      delete bills, provider alerts, state plan amendments
    - BlobService:        REST client for the blob store (list, put, delete, download)
    - DocumentService:    folder/file semantics on top of BlobService and DriveService
    - DriveService:       move and rename in the shared Drive library
    - UserService:        role lookup, role update, landing redirect
    - EmailService:       contact form relay over SMTP
    - DiagnosticsService: admin probes of email verification and Stripe

Each module exposes a module-level singleton (e.g. `document_service`) that
the routes import; tests patch those names.
"""
