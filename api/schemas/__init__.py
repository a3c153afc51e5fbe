"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API request validation
and response serialization.
"""

from api.schemas.common import ErrorResponse, HealthCheckResponse
from api.schemas.import_schema import StudentRowResponse, StudentImportResponse

__all__ = [
    # Common
    'ErrorResponse',
    'HealthCheckResponse',
    
    # Import
    'StudentRowResponse',
    'StudentImportResponse',
]
