"""Project chat message model"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from teamspace.database import Base
from teamspace.models.lifecycle import RecordState, ensure_transition
from teamspace.utils.time import utc_now

DELETED_PLACEHOLDER = "This message has been deleted"


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    mentions = Column(JSON, default=list, nullable=False)
    state = Column(SQLEnum(RecordState), default=RecordState.ACTIVE, nullable=False)
    is_edited = Column(Boolean, default=False, nullable=False)
    edited_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    project = relationship("Project", back_populates="messages")
    sender = relationship("User")

    @property
    def is_deleted(self) -> bool:
        return self.state == RecordState.DELETED

    def edit(self, content: str, mentions) -> None:
        self.content = content
        self.mentions = list(mentions)
        self.is_edited = True
        self.edited_at = utc_now()

    def soft_delete(self) -> None:
        self.state = ensure_transition(self.state, RecordState.DELETED)
        self.content = DELETED_PLACEHOLDER
