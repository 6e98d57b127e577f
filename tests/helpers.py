"""Small helpers shared by test modules."""

from io import BytesIO

from cloudnest.auth import create_token

BUCKET = "cloudnest-test"
PASSWORD = "testpass123"


def auth_headers(user):
    return {"Authorization": f"Bearer {create_token(user.id)}"}


def upload(hierarchy, user, name, folder_id=None, content=b"test file content"):
    return hierarchy.upload_file(user.id, name, BytesIO(content), folder_id=folder_id)


def blob_exists(s3_client, key):
    listing = s3_client.list_objects_v2(Bucket=BUCKET, Prefix=key)
    return listing.get("KeyCount", 0) > 0


def bucket_keys(s3_client):
    listing = s3_client.list_objects_v2(Bucket=BUCKET)
    return [obj["Key"] for obj in listing.get("Contents", [])]
