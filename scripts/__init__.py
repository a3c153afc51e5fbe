"""
Command-line tools for the student roster importer.
"""
