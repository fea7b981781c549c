"""
Tally Backend - API Routes Package
===================================

Route Inventory:
    - crud.py:    build_crud_router(), mounted once per resource in
                  tally.resources (/variables, /date-records, /records,
                  /elements, /element-ints)
    - auth.py:    /auth/join, /auth/login, /auth/logout, /auth/me
    - health.py:  GET /health

Routes handle HTTP concerns only (status codes, envelopes, cookies);
validation, lookups and diffing live in services and tally.core.
"""
