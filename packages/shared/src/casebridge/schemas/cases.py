from pydantic import BaseModel, Field
from typing import Optional


class CaseDetails(BaseModel):
    """Client-editable fields of a case."""
    title: str = Field(min_length=1)
    category: str = Field(min_length=1)
    description: str = Field(min_length=1)


class CasePatch(BaseModel):
    """Partial case update. Status is not editable here."""
    title: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)


class StoredFile(BaseModel):
    """A file already written to storage, ready to be attached to a case."""
    original_name: str
    filename: str
    path: Optional[str] = None
    mimetype: str
    size: int
