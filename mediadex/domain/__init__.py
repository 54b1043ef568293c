"""
Domain Layer - Core Entities

This layer defines the immutable entities produced by a load cycle and the
typed error conditions surfaced to collaborators. It has no dependencies on
the application or infrastructure layers.

Modules:
- models: MediaEntry, DirectoryNode, Snapshot, IndexerState
- exceptions: Indexing error taxonomy
"""
