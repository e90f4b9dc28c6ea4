# Schemas package init
"""
Clinic Tracker Backend — API Schemas
=====================================

What:  Pydantic models defining the request and response contract of every
       router. Kept apart from the ORM models so the wire format (aliases,
       envelopes, hidden columns such as password_hash) can differ from the
       table layout.
"""
