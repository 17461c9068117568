"""
Generated document model.
"""

from pydantic import BaseModel, Field, ConfigDict


class DocumentModel(BaseModel):
    """Opaque document payload returned by a generator."""
    model_config = ConfigDict(frozen=True)

    content: bytes = Field(..., description="Raw document bytes")
    content_type: str = Field(..., description="MIME type of the payload")
