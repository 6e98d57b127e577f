# Filename: cloudnest/dependencies.py
"""Request-scoped wiring of stores into the hierarchy engine.

The blob store and mailer are built once per process; the metadata store
wraps the request's own DB session.
"""

from functools import lru_cache

from fastapi import Depends
from sqlmodel import Session

from .blobstore import BlobStore
from .config import settings
from .db import get_session
from .hierarchy import HierarchyEngine
from .mailer import Mailer
from .metadata import MetadataStore


@lru_cache
def get_blob_store() -> BlobStore:
    return BlobStore.from_settings()


@lru_cache
def get_mailer() -> Mailer:
    return Mailer.from_settings()


def get_metadata_store(session: Session = Depends(get_session)) -> MetadataStore:
    return MetadataStore(session)


def get_hierarchy(
    metadata: MetadataStore = Depends(get_metadata_store),
    blobs: BlobStore = Depends(get_blob_store),
) -> HierarchyEngine:
    return HierarchyEngine(metadata, blobs, max_upload_bytes=settings.max_upload_size_mb * 1024 * 1024)
