# Filename: cloudnest/routers/files.py
from fastapi import APIRouter, Depends, UploadFile, File, Form, Query, status
from fastapi.responses import StreamingResponse
from typing import List, Optional
from urllib.parse import quote

from ..auth import get_current_user
from ..dependencies import get_hierarchy
from ..hierarchy import DEFAULT_CONTENT_TYPE, HierarchyEngine
from ..models import User
from ..schemas import FileOut, FileUploaded, MessageOut
from ..utils import parse_optional_id

router = APIRouter(prefix="/api/files", tags=["files"])


@router.post("/upload", response_model=FileUploaded, status_code=status.HTTP_201_CREATED)
def upload_file(
    file: UploadFile = File(...),
    folder_id: Optional[str] = Form(default=None, alias="folderId"),
    current_user: User = Depends(get_current_user),
    hierarchy: HierarchyEngine = Depends(get_hierarchy),
):
    record = hierarchy.upload_file(
        current_user.id,
        file.filename,
        file.file,
        content_type=file.content_type,
        folder_id=parse_optional_id(folder_id),
    )
    return FileUploaded(message="File uploaded successfully", file=FileOut.model_validate(record))


@router.get("", response_model=List[FileOut])
def list_files(
    folder: Optional[str] = Query(default=None),
    current_user: User = Depends(get_current_user),
    hierarchy: HierarchyEngine = Depends(get_hierarchy),
):
    files = hierarchy.list_files(current_user.id, parse_optional_id(folder))
    return [FileOut.model_validate(f) for f in files]


@router.get("/download/{file_id}")
def download_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    hierarchy: HierarchyEngine = Depends(get_hierarchy),
):
    record, body = hierarchy.open_file(file_id, current_user.id)
    headers = {"Content-Disposition": f"attachment; filename*=UTF-8''{quote(record.name)}"}
    return StreamingResponse(
        body.iter_chunks(1024 * 1024),
        media_type=record.content_type or DEFAULT_CONTENT_TYPE,
        headers=headers,
    )


@router.delete("/{file_id}", response_model=MessageOut)
def delete_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    hierarchy: HierarchyEngine = Depends(get_hierarchy),
):
    hierarchy.delete_file(file_id, current_user.id)
    return MessageOut(message="File deleted successfully")
