"""Tests for the owner-scoped metadata store."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from cloudnest.exceptions import StoreUnavailableError
from cloudnest.metadata import MetadataStore
from cloudnest.models import File, Folder


def _file(metadata, owner, key, folder_id=None):
    return metadata.create_file(
        name=key,
        blob_key=key,
        size=1,
        content_type="text/plain",
        owner_id=owner.id,
        folder_id=folder_id,
    )


def test_get_folder_requires_matching_owner(metadata, user, other_user):
    folder = metadata.create_folder("Docs", user.id)

    assert metadata.get_folder(folder.id, user.id).id == folder.id
    assert metadata.get_folder(folder.id, other_user.id) is None


def test_find_child_folders_root_level(metadata, user):
    top = metadata.create_folder("Top", user.id)
    metadata.create_folder("Nested", user.id, parent_id=top.id)

    assert [f.name for f in metadata.find_child_folders(None, user.id)] == ["Top"]
    assert [f.name for f in metadata.find_child_folders(top.id, user.id)] == ["Nested"]


def test_find_files_newest_first(metadata, user):
    folder = metadata.create_folder("Docs", user.id)
    first = _file(metadata, user, "k1", folder.id)
    second = _file(metadata, user, "k2", folder.id)

    assert [f.id for f in metadata.find_files(folder.id, user.id)] == [second.id, first.id]
    assert metadata.find_files(None, user.id) == []


def test_count_foreign_children(metadata, session, user, other_user):
    folder = metadata.create_folder("Docs", user.id)
    _file(metadata, user, "mine", folder.id)
    assert metadata.count_foreign_children(folder.id, user.id) == 0

    session.add(Folder(name="Stray", owner_id=other_user.id, parent_id=folder.id))
    session.add(File(name="stray", blob_key="stray", size=1, owner_id=other_user.id, folder_id=folder.id))
    session.commit()

    assert metadata.count_foreign_children(folder.id, user.id) == 2


def test_delete_records_report_absence(metadata, user, other_user):
    folder = metadata.create_folder("Docs", user.id)
    record = _file(metadata, user, "k1")
    folder_id, file_id = folder.id, record.id

    assert metadata.delete_file_record(file_id, other_user.id) is False
    assert metadata.delete_file_record(file_id, user.id) is True
    assert metadata.delete_file_record(file_id, user.id) is False

    assert metadata.delete_folder_record(folder_id, other_user.id) is False
    assert metadata.delete_folder_record(folder_id, user.id) is True
    assert metadata.delete_folder_record(folder_id, user.id) is False


def test_database_failure_is_store_unavailable():
    session = MagicMock()
    session.exec.side_effect = OperationalError("SELECT 1", {}, Exception("database is locked"))
    metadata = MetadataStore(session)

    with pytest.raises(StoreUnavailableError):
        metadata.find_files(None, 1)

    session.rollback.assert_called_once()


def test_new_records_are_stamped_in_utc():
    folder = Folder(name="Docs", owner_id=1)
    record = File(name="a.txt", blob_key="k", size=1, owner_id=1)

    assert folder.created_at.tzinfo is not None
    assert record.created_at.utcoffset().total_seconds() == 0
