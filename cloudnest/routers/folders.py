# Filename: cloudnest/routers/folders.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from ..auth import get_current_user
from ..dependencies import get_hierarchy
from ..hierarchy import HierarchyEngine
from ..models import User
from ..schemas import FolderCreate, FolderCreated, FolderDeleted, FolderOut
from ..utils import parse_optional_id

router = APIRouter(prefix="/api/folders", tags=["folders"])


@router.post("", response_model=FolderCreated, status_code=status.HTTP_201_CREATED)
def create_folder(
    data: FolderCreate,
    current_user: User = Depends(get_current_user),
    hierarchy: HierarchyEngine = Depends(get_hierarchy),
):
    folder = hierarchy.create_folder(current_user.id, data.name, data.parent)
    return FolderCreated(message="Folder created successfully", folder=FolderOut.model_validate(folder))


@router.get("", response_model=List[FolderOut])
def list_folders(
    parent: Optional[str] = Query(default=None),
    current_user: User = Depends(get_current_user),
    hierarchy: HierarchyEngine = Depends(get_hierarchy),
):
    folders = hierarchy.list_folders(current_user.id, parse_optional_id(parent))
    return [FolderOut.model_validate(f) for f in folders]


@router.delete("/{folder_id}", response_model=FolderDeleted)
def delete_folder(
    folder_id: int,
    current_user: User = Depends(get_current_user),
    hierarchy: HierarchyEngine = Depends(get_hierarchy),
):
    report = hierarchy.delete_folder(folder_id, current_user.id)
    return FolderDeleted(
        message="Folder deleted successfully",
        deleted_folders=report.folders_deleted,
        deleted_files=report.files_deleted,
    )
