# Routes package init
"""
Clinic Tracker Backend — API Routes Package
============================================

What:  HTTP route handlers. They unpack the request, call one service
       method and return its result; business rules live in services/.

Route Inventory:
    - users.py:         /api/users            account CRUD
    - emr.py:           /api/emr              EMR records
    - records.py:       /api/breakfast, /api/lunch, /api/dinner, /api/snack,
                        /api/exercise, /api/weight   (one factory, six routers)
    - daily_review.py:  /api/daily-review     one review per user per day
    - archive.py:       /api/archive          daily snapshots
    - auth.py:          /api/auth             email one-time codes
    - diagnosis.py:     /api/diagnosis        liver indices
    - health.py:        /health
"""
