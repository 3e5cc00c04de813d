"""
services/ - Business Logic Layer
================================
Each service composes repositories and enforces the rules the database
cannot: visibility, roles, and status transitions.
"""
