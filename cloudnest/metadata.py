# Filename: cloudnest/metadata.py
"""Owner-scoped access to folder and file records.

Every query here filters on ``owner_id``. Callers never get to see or
touch another user's rows through this class, whatever ids they pass.
Each mutating call commits on its own; there is no transaction spanning
several records.
"""

import logging
from functools import wraps
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import func
from sqlmodel import Session, select

from .exceptions import StoreUnavailableError
from .models import File, Folder

logger = logging.getLogger(__name__)


def _store_call(method):
    """Translate database failures into StoreUnavailableError.

    IntegrityError is left alone: it means the data was refused, not that
    the store is down.
    """

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except IntegrityError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            logger.exception("Metadata store call failed: %s", method.__name__)
            self.session.rollback()
            raise StoreUnavailableError("Metadata store unavailable") from exc

    return wrapper


class MetadataStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    # --- folders ---

    @_store_call
    def get_folder(self, folder_id: int, owner_id: int) -> Optional[Folder]:
        stmt = select(Folder).where(Folder.id == folder_id, Folder.owner_id == owner_id)
        return self.session.exec(stmt).first()

    @_store_call
    def find_child_folders(self, parent_id: Optional[int], owner_id: int) -> List[Folder]:
        """Folders directly under ``parent_id``; None selects root level."""
        stmt = select(Folder).where(Folder.owner_id == owner_id)
        if parent_id is None:
            stmt = stmt.where(Folder.parent_id == None)  # noqa: E711
        else:
            stmt = stmt.where(Folder.parent_id == parent_id)
        stmt = stmt.order_by(Folder.created_at.desc(), Folder.id.desc())
        return list(self.session.exec(stmt).all())

    @_store_call
    def count_foreign_children(self, folder_id: int, owner_id: int) -> int:
        """Count folders and files parented under ``folder_id`` by any other owner."""
        folders = self.session.exec(
            select(func.count(Folder.id)).where(Folder.parent_id == folder_id, Folder.owner_id != owner_id)
        ).one()
        files = self.session.exec(
            select(func.count(File.id)).where(File.folder_id == folder_id, File.owner_id != owner_id)
        ).one()
        return folders + files

    @_store_call
    def create_folder(self, name: str, owner_id: int, parent_id: Optional[int] = None) -> Folder:
        folder = Folder(name=name, owner_id=owner_id, parent_id=parent_id)
        self.session.add(folder)
        self.session.commit()
        self.session.refresh(folder)
        return folder

    @_store_call
    def delete_folder_record(self, folder_id: int, owner_id: int) -> bool:
        """Delete one folder row. Returns False if it was already gone."""
        folder = self.get_folder(folder_id, owner_id)
        if folder is None:
            return False
        self.session.delete(folder)
        self.session.commit()
        return True

    # --- files ---

    @_store_call
    def get_file(self, file_id: int, owner_id: int) -> Optional[File]:
        stmt = select(File).where(File.id == file_id, File.owner_id == owner_id)
        return self.session.exec(stmt).first()

    @_store_call
    def find_files(self, folder_id: Optional[int], owner_id: int) -> List[File]:
        """Files directly in ``folder_id``; None selects root level."""
        stmt = select(File).where(File.owner_id == owner_id)
        if folder_id is None:
            stmt = stmt.where(File.folder_id == None)  # noqa: E711
        else:
            stmt = stmt.where(File.folder_id == folder_id)
        stmt = stmt.order_by(File.created_at.desc(), File.id.desc())
        return list(self.session.exec(stmt).all())

    @_store_call
    def create_file(
        self,
        name: str,
        blob_key: str,
        size: int,
        content_type: Optional[str],
        owner_id: int,
        folder_id: Optional[int] = None,
    ) -> File:
        record = File(
            name=name,
            blob_key=blob_key,
            size=size,
            content_type=content_type,
            owner_id=owner_id,
            folder_id=folder_id,
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    @_store_call
    def delete_file_record(self, file_id: int, owner_id: int) -> bool:
        """Delete one file row. Returns False if it was already gone."""
        record = self.get_file(file_id, owner_id)
        if record is None:
            return False
        self.session.delete(record)
        self.session.commit()
        return True
