"""
Core utilities shared across the VilaNow API.

This package hosts configuration helpers (env vars, storage paths, backend
selection), logging setup, password hashing and small helpers such as id and
timestamp generation. Stores, models and services depend on these primitives
instead of reading os.environ directly.
"""
