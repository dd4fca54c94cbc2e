from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.content.curriculum_model import Curriculum
from app.models.content.lesson_model import Lesson
from app.schemas.content.curriculum_schema import DashboardStats


def get_dashboard_stats(db: Session) -> DashboardStats:
    return DashboardStats(
        total_lessons=db.query(func.count(Lesson.id)).scalar() or 0,
        active_lessons=db.query(func.count(Lesson.id)).filter(Lesson.is_active.is_(True)).scalar() or 0,
        total_curriculums=db.query(func.count(Curriculum.id)).scalar() or 0,
        active_curriculums=db.query(func.count(Curriculum.id))
        .filter(Curriculum.is_active.is_(True))
        .scalar()
        or 0,
    )
