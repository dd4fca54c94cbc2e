from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    display_name: Optional[str] = None
    role: str
    current_level: int = 1
    total_xp: int = 0
    streak_count: int = 0
    created_at: Optional[datetime] = None
