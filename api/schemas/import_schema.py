"""
Import-related Pydantic schemas.

This module contains schemas for student roster import responses.
"""

from typing import List, Union
from pydantic import BaseModel, Field


class StudentRowResponse(BaseModel):
    """A normalized student record."""

    No: Union[int, str] = Field(..., description="Row ordinal, declared or 1-based position")
    Code: str = Field(..., min_length=1, description="Student identifier")
    Name: str = Field(..., min_length=1, description="Student display name")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "No": 1,
                "Code": "A1",
                "Name": "Jane Doe"
            }
        }


class StudentImportResponse(BaseModel):
    """Students imported from an uploaded spreadsheet."""

    filename: str = Field(..., description="Name of the uploaded file")
    total: int = Field(..., ge=0, description="Number of imported students")
    students: List[StudentRowResponse] = Field(
        default_factory=list,
        description="Imported students in sheet order"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "filename": "roster.xlsx",
                "total": 2,
                "students": [
                    {"No": 1, "Code": "A1", "Name": "Jane Doe"},
                    {"No": 5, "Code": "B2", "Name": "Al Smith"}
                ]
            }
        }
