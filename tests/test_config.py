"""Tests for settings loading."""

from archivist.core.config import DEFAULT_B2_AUTHORIZE_URL, Settings


def test_defaults():
    s = Settings(_env_file=None)

    assert s.UPLOAD_MAX_ATTEMPTS == 5
    assert s.UPLOAD_RETRY_DELAY_SECONDS == 1.0
    assert s.EAGER_SESSION_REFRESH is True
    assert s.B2_AUTHORIZE_URL == DEFAULT_B2_AUTHORIZE_URL


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("ARCHIVIST_B2_KEY_ID", "k1")
    monkeypatch.setenv("ARCHIVIST_B2_BUCKET_ID", "b1")
    monkeypatch.setenv("ARCHIVIST_BIND", "127.0.0.1:9000")
    monkeypatch.setenv("ARCHIVIST_EAGER_SESSION_REFRESH", "false")

    s = Settings(_env_file=None)

    assert s.B2_KEY_ID == "k1"
    assert s.B2_BUCKET_ID == "b1"
    assert s.bind_host == "127.0.0.1"
    assert s.bind_port == 9000
    assert s.EAGER_SESSION_REFRESH is False


def test_bind_without_host():
    s = Settings(_env_file=None, BIND=":8080")

    assert s.bind_host == "0.0.0.0"
    assert s.bind_port == 8080


def test_size_conversions():
    s = Settings(_env_file=None, MAX_UPLOAD_MB=2, SPOOL_MAX_MEMORY_MB=1)

    assert s.max_upload_bytes == 2 * 1024 * 1024
    assert s.spool_max_memory_bytes == 1024 * 1024
