from pydantic import BaseModel
from typing import Optional


class UserPublic(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
