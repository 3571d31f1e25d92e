"""
Project File Model
"""
from sqlalchemy import BigInteger, Column, Integer, String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from teamspace.database import Base
from teamspace.models.lifecycle import RecordState, ensure_transition


class ProjectFile(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    url = Column(Text, nullable=False)
    storage_path = Column(Text, nullable=True)
    storage_type = Column(String(20), default="local", nullable=False)
    file_type = Column(String(50), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size = Column(BigInteger, nullable=False)
    uploaded_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    state = Column(SQLEnum(RecordState), default=RecordState.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    project = relationship("Project", back_populates="files")
    uploaded_by = relationship("User")

    def soft_delete(self) -> None:
        self.state = ensure_transition(self.state, RecordState.DELETED)
