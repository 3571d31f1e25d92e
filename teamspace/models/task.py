"""
Task Model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from teamspace.database import Base
from teamspace.utils.time import as_utc, utc_now


class TaskStatus(str, enum.Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    def next(self) -> "TaskStatus":
        """Status reached by toggling a task card."""
        order = list(TaskStatus)
        return order[(order.index(self) + 1) % len(order)]


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, default="", nullable=False)
    status = Column(SQLEnum(TaskStatus), default=TaskStatus.NEW, nullable=False, index=True)
    priority = Column(SQLEnum(TaskPriority), default=TaskPriority.MEDIUM, nullable=False)
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    due_date = Column(DateTime(timezone=True), nullable=True, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    position = Column(Integer, default=0, nullable=False)
    tags = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    project = relationship("Project", back_populates="tasks")
    creator = relationship("User", foreign_keys=[created_by_id])
    assignee = relationship("User", foreign_keys=[assigned_to_id])
    notifications = relationship("Notification", back_populates="task", cascade="all, delete-orphan")

    def apply_status(self, status: TaskStatus, now=None) -> None:
        """Set the status, keeping completed_at in lockstep with ``done``."""
        self.status = status
        if status == TaskStatus.DONE:
            if self.completed_at is None:
                self.completed_at = now or utc_now()
        else:
            self.completed_at = None

    def is_overdue(self, now=None) -> bool:
        if self.due_date is None or self.status == TaskStatus.DONE:
            return False
        return (now or utc_now()) > as_utc(self.due_date)
