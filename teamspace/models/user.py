"""
User Model
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from teamspace.database import Base
from teamspace.utils.time import as_utc, utc_now


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    EDITOR = "editor"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.EDITOR, nullable=False)
    avatar = Column(Text, nullable=True)
    login_streak = Column(Integer, default=0, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    project_memberships = relationship("ProjectMember", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="Notification.user_id",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def update_login_streak(self, now=None) -> None:
        """Advance the streak on consecutive-day logins, reset it after a gap."""
        now = now or utc_now()
        last_login = as_utc(self.last_login)

        if last_login is None:
            self.login_streak = 1
        else:
            diff_days = int((now - last_login).total_seconds() // 86400)
            if diff_days == 1:
                self.login_streak = (self.login_streak or 0) + 1
            elif diff_days > 1:
                self.login_streak = 1
            elif not self.login_streak:
                self.login_streak = 1

        self.last_login = now
