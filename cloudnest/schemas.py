# Filename: cloudnest/schemas.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr
from typing import Optional
from datetime import datetime


class MessageOut(BaseModel):
    message: str


class RegisterRequest(BaseModel):
    first_name: constr(strip_whitespace=True, min_length=1) = Field(alias="firstName")
    last_name: constr(strip_whitespace=True, min_length=1) = Field(alias="lastName")
    email: EmailStr
    password: constr(min_length=6)

    model_config = ConfigDict(populate_by_name=True)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: constr(min_length=6)


class UserOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class LoginOut(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserOut


class FolderCreate(BaseModel):
    name: str
    parent: Optional[int] = None


class FolderOut(BaseModel):
    id: int
    name: str
    parent_id: Optional[int]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FolderCreated(BaseModel):
    message: str
    folder: FolderOut


class FolderDeleted(BaseModel):
    message: str
    deleted_folders: int
    deleted_files: int


class FileOut(BaseModel):
    id: int
    name: str
    size: int
    content_type: Optional[str]
    folder_id: Optional[int]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FileUploaded(BaseModel):
    message: str
    file: FileOut
