from typing import Optional

from pydantic import BaseModel


class ModuleOut(BaseModel):
    id: str
    course_id: str
    course_title: Optional[str] = None
    title: str
    description: Optional[str] = None
    order_number: int
    is_active: bool
