"""
FastAPI application for the student roster importer.

This package contains the REST API for uploading spreadsheets and getting
back normalized student records.
"""

__version__ = "1.0.0"
