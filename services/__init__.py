"""
Service layer for the student roster importer.

This package contains framework-agnostic business logic that can be used
by CLI, API, or any other interface.
"""

__version__ = "1.0.0"
