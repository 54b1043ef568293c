"""
Tests Module

Contains test suites for mediadex:
- unit: Unit tests for individual components
- integration: Indexing against real directories and watchdog observers
"""
