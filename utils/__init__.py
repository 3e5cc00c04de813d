"""
utils/ - Shared Helpers
=======================
Logging setup and paging normalization.
"""
