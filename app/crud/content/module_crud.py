from __future__ import annotations

from sqlalchemy.orm import Session

from app.models.content.course_model import Course, Module
from app.schemas.content.course_schema import ModuleOut


def list_modules(db: Session) -> list[ModuleOut]:
    rows = (
        db.query(Module, Course.title)
        .join(Course, Module.course_id == Course.id)
        .order_by(Module.course_id.asc(), Module.order_number.asc())
        .all()
    )
    return [
        ModuleOut(
            id=module.id,
            course_id=module.course_id,
            course_title=course_title,
            title=module.title,
            description=module.description,
            order_number=module.order_number,
            is_active=module.is_active,
        )
        for module, course_title in rows
    ]


def delete_module(db: Session, module_id: str) -> bool:
    module = db.get(Module, module_id)
    if module is None:
        return False
    db.delete(module)
    db.commit()
    return True
