"""
Dependency injection utilities for FastAPI.

This module provides reusable dependencies for the import service and
upload validation.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, status

from api.config import settings
from services.student_import_service import StudentImportService

logger = logging.getLogger(__name__)


def get_import_service() -> StudentImportService:
    """
    Get student import service dependency.

    Usage:
        @app.post("/endpoint")
        async def endpoint(service: StudentImportService = Depends(get_import_service)):
            students = await service.import_students(file)
    """
    return StudentImportService()


def verify_file_size(file_size: Optional[int]) -> bool:
    """
    Verify uploaded file size is within limit.

    Args:
        file_size: File size in bytes, None when the client did not send it

    Returns:
        True if size is acceptable

    Raises:
        HTTPException: If file is too large
    """
    max_size_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024

    if file_size is not None and file_size > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size ({file_size / 1024 / 1024:.1f} MB) exceeds maximum allowed "
                   f"({settings.MAX_FILE_SIZE_MB} MB)"
        )

    return True


def verify_file_extension(filename: Optional[str]) -> bool:
    """
    Verify file has allowed extension.

    Args:
        filename: Name of uploaded file

    Returns:
        True if extension is allowed

    Raises:
        HTTPException: If extension is not allowed
    """
    ext = Path(filename or '').suffix.lower()

    if ext not in [e.lower() for e in settings.ALLOWED_EXTENSIONS]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File extension '{ext}' not allowed. "
                   f"Allowed extensions: {', '.join(settings.ALLOWED_EXTENSIONS)}"
        )

    return True
