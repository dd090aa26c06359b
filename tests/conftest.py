import boto3
import pytest
from moto import mock_aws

from files_core.s3 import shutdown_registry
from files_core.settings import get_settings
from files_core.staging import get_reaper
from tests.consts import TEST_BUCKET_NAME, TEST_DB_NAME, TEST_REGION

pytest_plugins = [
    "tests.fixtures.db_client",
    "tests.fixtures.staging_fixtures",
]


@pytest.fixture(autouse=True)
def test_environment(monkeypatch, tmp_path):
    """Point settings at fake credentials, the test bucket and a per-test temp dir."""
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.setenv("S3_BUCKET_NAME", TEST_BUCKET_NAME)
    monkeypatch.setenv("DB_PATH", str(tmp_path / TEST_DB_NAME))
    monkeypatch.setenv("TEMP_DIR", str(tmp_path))
    get_settings.cache_clear()
    yield
    get_reaper().cancel_all()
    shutdown_registry()
    get_settings.cache_clear()


@pytest.fixture
def mocked_aws():
    """Mocked AWS with an empty, versioned test bucket."""
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        s3_client.put_bucket_versioning(
            Bucket=TEST_BUCKET_NAME,
            VersioningConfiguration={"Status": "Enabled"},
        )
        yield
        # Cached clients must not outlive the mock
        shutdown_registry()


@pytest.fixture
def s3_client(mocked_aws):
    return boto3.client("s3", region_name=TEST_REGION)
