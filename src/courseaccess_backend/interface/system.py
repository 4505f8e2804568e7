from typing import List, Optional
from pydantic import BaseModel, Field


class AdminConfig(BaseModel):
    initialized: bool = False
    super_admin: Optional[str] = None

class AdminList(BaseModel):
    super_admin: Optional[str] = None
    admins: List[str] = Field(default_factory=list)
