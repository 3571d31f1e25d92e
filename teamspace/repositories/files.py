"""Project file persistence"""
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from teamspace.models import ProjectFile, RecordState


def _file_query(db: Session):
    return db.query(ProjectFile).options(selectinload(ProjectFile.uploaded_by))


def get_file(db: Session, file_id: int) -> Optional[ProjectFile]:
    return (
        _file_query(db)
        .filter(ProjectFile.id == file_id, ProjectFile.state == RecordState.ACTIVE)
        .first()
    )


def list_project_files(db: Session, project_id: int) -> List[ProjectFile]:
    return (
        _file_query(db)
        .filter(ProjectFile.project_id == project_id, ProjectFile.state == RecordState.ACTIVE)
        .order_by(ProjectFile.created_at.desc(), ProjectFile.id.desc())
        .all()
    )


def create_file(db: Session, **fields) -> ProjectFile:
    project_file = ProjectFile(state=RecordState.ACTIVE, **fields)
    db.add(project_file)
    db.commit()
    return get_file(db, project_file.id)


def update_file(db: Session, project_file: ProjectFile, changes: dict) -> ProjectFile:
    for field, value in changes.items():
        if value is not None:
            setattr(project_file, field, value)
    db.commit()
    db.refresh(project_file)
    return project_file


def soft_delete_file(db: Session, project_file: ProjectFile) -> None:
    project_file.soft_delete()
    db.commit()
