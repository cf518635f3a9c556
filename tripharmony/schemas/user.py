from datetime import datetime
from pydantic import BaseModel

class UserRead(BaseModel):
    id: int
    phone: str
    created_at: datetime

    class Config:
        from_attributes = True
