"""
elvdoc Test Suite.

This package contains:
- unit/: Unit tests (temporary files only, no external services)
"""
