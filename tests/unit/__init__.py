"""
Unit Tests Module

Contains unit tests for individual components:
- classifier, scanner, tree builder and content cache
- watcher and indexer with stub observers and load cycles
- configuration, domain models and the command line
"""
