"""
Tally Backend - Services Layer
===============================

What:  Business logic between routes (HTTP) and database (persistence).

Service Inventory:
    - CrudService: create/list/get/update/delete for any ResourceDescriptor
    - AuthService: local account join and credential checks

Routes handle HTTP (status codes, envelopes, cookies); services raise
TallyError subclasses and never build responses.
"""
