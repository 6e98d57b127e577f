"""Tests for the S3 blob store client."""

from io import BytesIO
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from cloudnest.blobstore import BlobNotFoundError, BlobStore, make_blob_key
from cloudnest.exceptions import StoreUnavailableError
from tests.helpers import BUCKET, blob_exists


def _client_error(code, operation="HeadObject"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def test_make_blob_key_is_scoped_and_sanitized():
    key = make_blob_key(7, "my report/../final?.pdf")

    assert key.startswith("uploads/7/")
    assert key.endswith("-my report..final.pdf")
    assert make_blob_key(7, "a.txt") != make_blob_key(7, "a.txt")


def test_put_then_get(blob_store, s3_client):
    blob_store.put_blob("uploads/1/x", BytesIO(b"data"), content_type="text/plain")

    assert blob_store.get_blob("uploads/1/x").read() == b"data"
    head = s3_client.head_object(Bucket=BUCKET, Key="uploads/1/x")
    assert head["ContentType"] == "text/plain"


def test_get_missing_blob(blob_store):
    with pytest.raises(BlobNotFoundError):
        blob_store.get_blob("uploads/1/nothing")


def test_delete_existing_blob(blob_store, s3_client):
    blob_store.put_blob("uploads/1/x", BytesIO(b"data"))

    assert blob_store.delete_blob("uploads/1/x") is True
    assert not blob_exists(s3_client, "uploads/1/x")


def test_delete_missing_blob_counts_as_done(blob_store):
    assert blob_store.delete_blob("uploads/1/never-there") is False


def test_delete_access_denied_is_store_unavailable():
    client = MagicMock()
    client.head_object.side_effect = _client_error("AccessDenied")
    store = BlobStore(client, BUCKET)

    with pytest.raises(StoreUnavailableError):
        store.delete_blob("uploads/1/x")

    client.delete_object.assert_not_called()


def test_unreachable_endpoint_is_store_unavailable():
    client = MagicMock()
    client.upload_fileobj.side_effect = EndpointConnectionError(endpoint_url="http://s3.invalid")
    store = BlobStore(client, BUCKET)

    with pytest.raises(StoreUnavailableError):
        store.put_blob("uploads/1/x", BytesIO(b"data"))


def test_rollback_upload_swallows_store_failure():
    client = MagicMock()
    client.head_object.side_effect = _client_error("InternalError")
    store = BlobStore(client, BUCKET)

    store.rollback_upload("uploads/1/x")

    client.head_object.assert_called_once()
