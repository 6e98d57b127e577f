"""Exceptions for the storage domain."""


class CloudNestError(Exception):
    """Base class for domain errors raised below the HTTP layer."""


class NotFoundError(CloudNestError):
    """Raised when a record is absent or not owned by the caller.

    Both cases produce the same error.
    """


class FolderNotFoundError(NotFoundError):
    def __init__(self, folder_id: int) -> None:
        self.folder_id = folder_id
        super().__init__("Folder not found")


class FileRecordNotFoundError(NotFoundError):
    def __init__(self, file_id: int) -> None:
        self.file_id = file_id
        super().__init__("File not found")


class ValidationError(CloudNestError):
    """Raised when input is well-formed but not acceptable."""


class UploadTooLargeError(CloudNestError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        """Initialize UploadTooLargeError.

        Args:
            size_bytes: Size of the rejected upload.
            limit_bytes: Configured maximum.
        """
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"Uploaded file exceeds limit: {size_bytes} bytes "
            f"(max {limit_bytes} bytes)",
        )


class InvariantViolationError(CloudNestError):
    """Raised when stored data breaks a hierarchy invariant.

    Covers folder cycles and children whose owner differs from the owner
    of their parent. Operations that detect one stop before mutating.
    """


class StoreUnavailableError(CloudNestError):
    """Raised when the metadata store or blob store cannot serve a request."""


class PartialDeletionError(CloudNestError):
    """Raised when a cascade delete stops part-way through.

    Everything counted here is already gone. Calling ``delete_folder``
    again on the same root resumes with whatever is left.
    """

    def __init__(self, folder_id: int, folders_deleted: int, files_deleted: int) -> None:
        """Initialize PartialDeletionError.

        Args:
            folder_id: Root of the aborted cascade.
            folders_deleted: Folder records removed before the failure.
            files_deleted: File records (and blobs) removed before the failure.
        """
        self.folder_id = folder_id
        self.folders_deleted = folders_deleted
        self.files_deleted = files_deleted
        super().__init__(
            f"Cascade delete of folder {folder_id} aborted after removing "
            f"{folders_deleted} folders and {files_deleted} files",
        )
