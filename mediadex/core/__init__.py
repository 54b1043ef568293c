"""
Core Module - Application Configuration and Utilities

Contains core application components:
- config: Configuration management with JSON storage
- constants: Application constants and defaults
- utils: Formatting helpers
"""
