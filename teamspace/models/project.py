"""
Project Model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from teamspace.database import Base
from teamspace.models.lifecycle import ensure_transition
from teamspace.models.project_member import MemberRole


class ProjectCategory(str, enum.Enum):
    TECH = "tech"
    MARKETING = "marketing"
    OPS = "ops"
    PERSONAL = "personal"


class ProjectStatus(str, enum.Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    COMPLETED = "completed"

    def can_transition_to(self, target: "ProjectStatus") -> bool:
        return target in _PROJECT_TRANSITIONS[self]


_PROJECT_TRANSITIONS = {
    ProjectStatus.ACTIVE: {ProjectStatus.ARCHIVED, ProjectStatus.COMPLETED},
    ProjectStatus.ARCHIVED: {ProjectStatus.ACTIVE, ProjectStatus.COMPLETED},
    ProjectStatus.COMPLETED: {ProjectStatus.ACTIVE},
}


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, default="", nullable=False)
    category = Column(SQLEnum(ProjectCategory), default=ProjectCategory.TECH, nullable=False, index=True)
    status = Column(SQLEnum(ProjectStatus), default=ProjectStatus.ACTIVE, nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    created_by = relationship("User", foreign_keys=[created_by_id])
    members = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectMember.id",
    )
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")
    messages = relationship("Message", back_populates="project", cascade="all, delete-orphan")
    files = relationship("ProjectFile", back_populates="project", cascade="all, delete-orphan")

    def member_for(self, user_id: int):
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None

    def is_member(self, user_id: int) -> bool:
        return self.member_for(user_id) is not None

    def is_owner(self, user_id: int) -> bool:
        member = self.member_for(user_id)
        return member is not None and member.role == MemberRole.OWNER

    def transition_to(self, status: ProjectStatus) -> None:
        self.status = ensure_transition(self.status, status)
