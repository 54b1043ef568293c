"""
Infrastructure Layer - Supporting Services

Modules:
- cache: Thread-safe in-memory content cache keyed by file identity
"""
