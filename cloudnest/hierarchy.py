# Filename: cloudnest/hierarchy.py
"""Folder hierarchy operations: create, list, cascade delete, file pairing.

The engine owns the ordering rules that keep blobs and metadata records in
step with each other:

- a file record is written only after its blob upload succeeded, and the
  blob is removed again if the record cannot be written;
- a file record is removed only after its blob is confirmed gone;
- a folder record is removed only after everything under it is gone.

Every store call is scoped by the owning user's id, at every level of the
tree, so a subtree is only touched where each node independently belongs
to the caller.
"""

import logging
import mimetypes
from dataclasses import dataclass
from typing import Any, BinaryIO, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from .blobstore import BlobNotFoundError, BlobStore, make_blob_key
from .exceptions import (
    FileRecordNotFoundError,
    FolderNotFoundError,
    InvariantViolationError,
    PartialDeletionError,
    StoreUnavailableError,
    UploadTooLargeError,
    ValidationError,
)
from .metadata import MetadataStore
from .models import File, Folder

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class DeletionReport:
    """Outcome of a completed cascade delete."""

    folder_id: int
    folders_deleted: int = 0
    files_deleted: int = 0
    # blobs that were already gone when their record was removed
    blobs_missing: int = 0


class HierarchyEngine:
    def __init__(self, metadata: MetadataStore, blobs: BlobStore, max_upload_bytes: Optional[int] = None) -> None:
        self.metadata = metadata
        self.blobs = blobs
        self.max_upload_bytes = max_upload_bytes

    # --- folders ---

    def create_folder(self, owner_id: int, name: str, parent_id: Optional[int] = None) -> Folder:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Folder name is required")
        if parent_id is not None and self.metadata.get_folder(parent_id, owner_id) is None:
            raise FolderNotFoundError(parent_id)
        folder = self.metadata.create_folder(name, owner_id, parent_id)
        logger.info("Folder created: ID=%d owner=%d parent=%s", folder.id, owner_id, parent_id)
        return folder

    def list_folders(self, owner_id: int, parent_id: Optional[int] = None) -> List[Folder]:
        return self.metadata.find_child_folders(parent_id, owner_id)

    def list_files(self, owner_id: int, folder_id: Optional[int] = None) -> List[File]:
        return self.metadata.find_files(folder_id, owner_id)

    def delete_folder(self, folder_id: int, owner_id: int) -> DeletionReport:
        """Delete a folder together with everything beneath it.

        The subtree is first walked read-only to produce a post-order list
        of folders; that walk is where cycles and cross-owner children are
        detected, so a corrupt tree is refused before anything is removed.
        The folders are then emptied and removed deepest first.

        On the first store failure the cascade stops and raises
        PartialDeletionError. Whatever was removed stays removed, and
        calling this again on the same folder finishes the job.

        Args:
            folder_id: Root of the subtree to delete.
            owner_id: Owning user; every node must belong to them.

        Returns:
            DeletionReport with counts of removed records.

        Raises:
            FolderNotFoundError: Folder absent or owned by someone else.
            InvariantViolationError: Cycle or cross-owner child found.
            StoreUnavailableError: A store failed before any mutation.
            PartialDeletionError: A store failed mid-cascade.
        """
        root = self.metadata.get_folder(folder_id, owner_id)
        if root is None:
            raise FolderNotFoundError(folder_id)

        order = self._post_order(root, owner_id)
        logger.info(
            "Deleting folder: ID=%d owner=%d (%d folders in subtree)",
            folder_id,
            owner_id,
            len(order),
        )

        report = DeletionReport(folder_id=folder_id)
        try:
            for current_id in order:
                # files are enumerated now, not during planning, so uploads
                # that landed in the meantime go too
                files = [(r.id, r.blob_key) for r in self.metadata.find_files(current_id, owner_id)]
                for file_id, blob_key in files:
                    self._remove_file(file_id, blob_key, owner_id, report)
                if self.metadata.find_files(current_id, owner_id) or self.metadata.find_child_folders(current_id, owner_id):
                    # created after the walk; a retry picks it up
                    logger.warning("Folder gained content during delete: ID=%d", current_id)
                    raise PartialDeletionError(folder_id, report.folders_deleted, report.files_deleted)
                if self.metadata.delete_folder_record(current_id, owner_id):
                    report.folders_deleted += 1
        except (StoreUnavailableError, IntegrityError) as exc:
            logger.exception(
                "Cascade delete aborted: root=%d folders_deleted=%d files_deleted=%d",
                folder_id,
                report.folders_deleted,
                report.files_deleted,
            )
            raise PartialDeletionError(folder_id, report.folders_deleted, report.files_deleted) from exc

        logger.info(
            "Folder deleted: ID=%d folders=%d files=%d blobs_missing=%d",
            folder_id,
            report.folders_deleted,
            report.files_deleted,
            report.blobs_missing,
        )
        return report

    def _post_order(self, root: Folder, owner_id: int) -> List[int]:
        """Return folder ids of the subtree under ``root``, children first, ``root`` last."""
        seen = {root.id}
        stack: List[Tuple[Folder, bool]] = [(root, False)]
        order: List[int] = []
        while stack:
            folder, expanded = stack.pop()
            if expanded:
                order.append(folder.id)
                continue
            if self.metadata.count_foreign_children(folder.id, owner_id):
                raise InvariantViolationError(f"Folder {folder.id} holds items owned by another user")
            stack.append((folder, True))
            for child in self.metadata.find_child_folders(folder.id, owner_id):
                # each folder has a single parent, so meeting one twice means a cycle
                if child.id in seen:
                    raise InvariantViolationError(f"Folder cycle detected at folder {child.id}")
                seen.add(child.id)
                stack.append((child, False))
        return order

    def _remove_file(self, file_id: int, blob_key: str, owner_id: int, report: DeletionReport) -> None:
        if not self.blobs.delete_blob(blob_key):
            report.blobs_missing += 1
        if self.metadata.delete_file_record(file_id, owner_id):
            report.files_deleted += 1

    # --- files ---

    def upload_file(
        self,
        owner_id: int,
        filename: str,
        fileobj: BinaryIO,
        content_type: Optional[str] = None,
        folder_id: Optional[int] = None,
    ) -> File:
        """Store a blob and then record it.

        Raises:
            FolderNotFoundError: Target folder absent or not owned.
            UploadTooLargeError: Payload exceeds ``max_upload_bytes``.
            StoreUnavailableError: Blob or metadata store failed.
        """
        if not filename:
            raise ValidationError("No file uploaded")
        if folder_id is not None and self.metadata.get_folder(folder_id, owner_id) is None:
            raise FolderNotFoundError(folder_id)

        size = _measure(fileobj)
        if self.max_upload_bytes is not None and size > self.max_upload_bytes:
            raise UploadTooLargeError(size, self.max_upload_bytes)

        content_type = content_type or mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE
        blob_key = make_blob_key(owner_id, filename)
        self.blobs.put_blob(blob_key, fileobj, content_type)

        try:
            record = self.metadata.create_file(
                name=filename,
                blob_key=blob_key,
                size=size,
                content_type=content_type,
                owner_id=owner_id,
                folder_id=folder_id,
            )
        except Exception as exc:
            logger.exception("Failed to record upload, rolling back blob: %s", blob_key)
            self.blobs.rollback_upload(blob_key)
            if isinstance(exc, IntegrityError) and folder_id is not None:
                # folder removed between the check above and the insert
                raise FolderNotFoundError(folder_id) from exc
            raise

        logger.info("File uploaded: ID=%d key=%s size=%d", record.id, blob_key, size)
        return record

    def open_file(self, file_id: int, owner_id: int) -> Tuple[File, Any]:
        """Return ``(record, body)`` for an owned file.

        A record whose blob has disappeared is reported as not found.
        """
        record = self.metadata.get_file(file_id, owner_id)
        if record is None:
            raise FileRecordNotFoundError(file_id)
        try:
            body = self.blobs.get_blob(record.blob_key)
        except BlobNotFoundError:
            logger.warning("File record without blob: ID=%d key=%s", file_id, record.blob_key)
            raise FileRecordNotFoundError(file_id)
        return record, body

    def delete_file(self, file_id: int, owner_id: int) -> None:
        record = self.metadata.get_file(file_id, owner_id)
        if record is None:
            raise FileRecordNotFoundError(file_id)
        blob_key = record.blob_key
        self.blobs.delete_blob(blob_key)
        self.metadata.delete_file_record(file_id, owner_id)
        logger.info("File deleted: ID=%d key=%s", file_id, blob_key)


def _measure(fileobj: BinaryIO) -> int:
    fileobj.seek(0, 2)
    size = fileobj.tell()
    fileobj.seek(0)
    return size
