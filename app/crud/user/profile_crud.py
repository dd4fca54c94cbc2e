from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.user.profile_model import Profile


def list_profiles(db: Session) -> list[Profile]:
    return db.query(Profile).order_by(Profile.created_at.desc()).all()


def get_profile(db: Session, profile_id: str) -> Profile | None:
    return db.get(Profile, profile_id)


def get_profile_by_email(db: Session, email: str) -> Profile | None:
    return db.query(Profile).filter(func.lower(Profile.email) == email.strip().lower()).first()


def delete_profile(db: Session, profile_id: str) -> bool:
    profile = db.get(Profile, profile_id)
    if profile is None:
        return False
    db.delete(profile)
    db.commit()
    return True
