"""
Tally Backend - Pydantic Schemas
=================================

    common.py     envelopes, error body, health
    resources.py  request bodies and output models per resource
    auth.py       join/login bodies and the identity model
"""
