"""
Application Layer - Indexing and Synchronization

This layer implements the indexing use cases: classifying files, scanning
a root, building the directory tree, watching for changes and publishing
snapshots to collaborators.

Modules:
- media_index: Classifier, scanner, tree builder, watcher and indexer
"""
