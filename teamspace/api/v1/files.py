"""Project file endpoints"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from teamspace.api.v1.serializers import serialize_file, to_payload
from teamspace.database import get_db
from teamspace.dependencies import ensure_project_member, get_broadcaster, get_current_user, get_file_storage
from teamspace.models import ProjectFile, User
from teamspace.realtime import Broadcaster
from teamspace.repositories import files as file_repo
from teamspace.repositories import projects as project_repo
from teamspace.schemas import Envelope, ListEnvelope, ProjectFileResponse, ProjectFileUpdate
from teamspace.services.storage import LocalFileStorage, file_extension, validate_upload

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_file_or_404(db: Session, file_id: int) -> ProjectFile:
    project_file = file_repo.get_file(db, file_id)
    if not project_file:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return project_file


def _ensure_uploader(project_file: ProjectFile, user: User, detail: str) -> None:
    if user.is_admin or project_file.uploaded_by_id == user.id:
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


@router.get("/project/{project_id}", response_model=ListEnvelope[ProjectFileResponse])
async def list_files(
    project_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = project_repo.get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    ensure_project_member(project, current_user, "Not authorized to view files in this project")

    files = file_repo.list_project_files(db, project.id)
    return ListEnvelope(count=len(files), data=[serialize_file(item) for item in files])


@router.get("/{file_id}", response_model=Envelope[ProjectFileResponse])
async def get_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project_file = _get_file_or_404(db, file_id)
    ensure_project_member(project_file.project, current_user, "Not authorized to view files in this project")
    return Envelope(data=serialize_file(project_file))


@router.post("", response_model=Envelope[ProjectFileResponse], status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    project_id: Optional[int] = Form(None, alias="projectId"),
    description: str = Form(""),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """Store an upload on disk and record it against a project."""
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    if project_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Project ID is required")

    project = project_repo.get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    ensure_project_member(project, current_user, "Not authorized to upload files to this project")
    validate_upload(file)

    name, storage_path, url, size = await storage.save(project.id, file)
    try:
        project_file = file_repo.create_file(
            db,
            project_id=project.id,
            name=name,
            original_name=file.filename,
            description=description.strip(),
            url=url,
            storage_path=storage_path,
            storage_type=storage.storage_type,
            file_type=file_extension(file.filename),
            mime_type=file.content_type,
            size=size,
            uploaded_by_id=current_user.id,
        )
    except Exception:
        db.rollback()
        storage.delete(storage_path)
        raise

    response = serialize_file(project_file)
    await broadcaster.to_project(project.id, "file_uploaded", to_payload(response))
    logger.info("User %s uploaded %s (%s bytes) to project %s", current_user.id, name, size, project.id)

    return Envelope(data=response, message="File uploaded successfully")


@router.put("/{file_id}", response_model=Envelope[ProjectFileResponse])
async def update_file(
    file_id: int,
    file_update: ProjectFileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project_file = _get_file_or_404(db, file_id)
    _ensure_uploader(project_file, current_user, "Not authorized to edit this file")

    project_file = file_repo.update_file(db, project_file, file_update.model_dump(exclude_unset=True))
    return Envelope(data=serialize_file(project_file), message="File updated successfully")


@router.delete("/{file_id}", response_model=Envelope[None])
async def delete_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    project_file = _get_file_or_404(db, file_id)
    _ensure_uploader(project_file, current_user, "Not authorized to delete this file")

    storage_path = project_file.storage_path
    file_repo.soft_delete_file(db, project_file)

    if storage_path:
        try:
            storage.delete(storage_path)
        except OSError:
            logger.warning("Could not remove stored bytes for file %s at %s", file_id, storage_path, exc_info=True)

    return Envelope(message="File deleted successfully")
