from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class DocumentResponse(BaseModel):
    id: UUID
    patent_id: UUID
    name: str
    type: str
    url: str
    filename: str
    size: int
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)
