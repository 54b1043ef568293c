"""
Integration Tests Module

Contains integration tests for component interactions:
- test_index_workflow: Load cycles, live updates and watch failures
"""
