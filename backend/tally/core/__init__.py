"""
Tally Backend - Core Helpers
=============================

Small, resource-agnostic building blocks shared by every CRUD route:

    - responses:  success/failure envelope
    - validation: required-field check
    - partial:    three-state field values for PATCH bodies
    - lookups:    existence checks for ids and foreign keys
    - updates:    diff-and-update with no-op detection
"""
