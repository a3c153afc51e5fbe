"""
Import router - Handle student roster uploads.

This module provides the endpoint for uploading a spreadsheet and getting
back the normalized student records it contains.
"""

import logging

from fastapi import APIRouter, UploadFile, File, Depends, HTTPException, status

from api.dependencies import get_import_service, verify_file_extension, verify_file_size
from api.schemas.import_schema import StudentImportResponse, StudentRowResponse
from services.student_import_service import StudentImportService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/students', tags=['import'])


@router.post('/import', response_model=StudentImportResponse)
async def import_student_roster(
    file: UploadFile = File(..., description="Roster spreadsheet (.xlsx or .xlsm)"),
    service: StudentImportService = Depends(get_import_service)
):
    """
    Upload a roster spreadsheet and return its students.

    The first sheet is read with the header row `No | Code | Name`. Rows
    without a Code or a Name are left out, names are title-cased and a
    missing No is replaced by the row position.

    **Returns:**
    - 200 with the imported students (empty list for an empty file)
    - 400 if the file extension is not allowed
    - 413 if the file is too large
    - 422 if the file could not be read as a workbook

    **Example:**
    ```bash
    curl -F "file=@roster.xlsx" http://localhost:8000/api/students/import
    ```
    """
    logger.info(f"Import request: {file.filename}")

    verify_file_extension(file.filename)
    verify_file_size(file.size)

    try:
        students = await service.import_students(file)
    except Exception as e:
        logger.error(f"Import of {file.filename} failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Import failed: {str(e) or type(e).__name__}"
        )
    finally:
        await file.close()

    return StudentImportResponse(
        filename=file.filename,
        total=len(students),
        students=[StudentRowResponse.model_validate(student) for student in students]
    )
