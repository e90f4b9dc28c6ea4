# Services package init
"""
Clinic Tracker Backend — Services Layer
========================================

What:  Business logic between the routes (HTTP) and the database.
How:   Stateless classes with one module-level instance each. Every method
       receives the request's AsyncSession; none opens its own.

Service Inventory:
    - UserService:       accounts, bcrypt password hashing, user existence check
    - EmrService:        EMR records
    - RecordService:     the seven daily logs, driven by RecordKind descriptors
    - ownership:         record ownership predicate (ok / not_found / forbidden)
    - ArchiveService:    daily snapshot write and decode
    - AuthService:       one-time email codes
    - MailSender:        abstract outbound mail; FastMailSender implementation
    - DiagnosisService:  liver index calculation and history
"""
