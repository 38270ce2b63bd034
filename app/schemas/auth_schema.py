import uuid
from pydantic import BaseModel
from typing import Optional

class AuthenticatedUser(BaseModel):
    id: uuid.UUID
    email: Optional[str] = None
    phone: Optional[str] = None
    full_name: Optional[str] = None
