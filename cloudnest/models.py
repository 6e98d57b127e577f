# Filename: cloudnest/models.py
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    first_name: str
    last_name: str
    hashed_password: str
    created_at: datetime = Field(default_factory=_utcnow)

    # flipped by the emailed activation link
    is_active: bool = Field(default=False, nullable=False)

    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None


# Folders and files are only ever reached through owner-scoped queries, so
# neither model carries ORM relationships: deleting a row must never cascade
# or re-parent anything behind the hierarchy engine's back.
class Folder(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    owner_id: int = Field(foreign_key="user.id", index=True)
    parent_id: Optional[int] = Field(default=None, foreign_key="folder.id", index=True)
    created_at: datetime = Field(default_factory=_utcnow)


class File(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str  # display name, as uploaded
    blob_key: str = Field(index=True, unique=True)  # object key in the blob store
    size: int
    content_type: Optional[str] = None
    owner_id: int = Field(foreign_key="user.id", index=True)
    folder_id: Optional[int] = Field(default=None, foreign_key="folder.id", index=True)
    created_at: datetime = Field(default_factory=_utcnow)
