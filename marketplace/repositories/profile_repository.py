"""
Profile repository for user data access.
"""

from typing import List, Optional

from sqlalchemy import func, select

from marketplace import db
from marketplace.enums import UserRole
from marketplace.models import Profile
from marketplace.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Repository for profile data access operations."""

    def __init__(self):
        super().__init__(Profile)

    def find_by_email(self, email: str) -> Optional[Profile]:
        """Find a profile by email, case-insensitively."""
        if not email:
            return None
        return db.session.execute(
            select(Profile).where(func.lower(Profile.email) == email.strip().lower())
        ).scalars().first()

    def get_non_admins(self) -> List[Profile]:
        """Get every non-admin profile, oldest first."""
        return db.session.execute(
            select(Profile)
            .where(Profile.role != UserRole.ADMIN.value)
            .order_by(Profile.created_at.asc())
        ).scalars().all()

    def email_for(self, user_id: Optional[str]) -> Optional[str]:
        """Look up the email belonging to a profile id."""
        if not user_id:
            return None
        return db.session.execute(
            select(Profile.email).where(Profile.id == user_id)
        ).scalar_one_or_none()
