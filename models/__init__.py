"""
models/ - Domain Layer
======================
Plain dataclasses for every entity, plus the status, role and privacy
constants shared by repositories and services.
"""
