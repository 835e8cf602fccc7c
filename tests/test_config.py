import pytest

from linguala.config import DatabaseSettings, Settings
from linguala.pipelines.documents import format_size_limit


def test_nested_db_settings_accept_dicts():
    config = Settings(db={"url": "sqlite+aiosqlite:///./other.db", "echo": True})
    assert config.db.url == "sqlite+aiosqlite:///./other.db"
    assert config.db.echo is True


def test_nested_db_settings_accept_instances():
    config = Settings(db=DatabaseSettings(url="postgresql+asyncpg://db/linguala"))
    assert config.db.url == "postgresql+asyncpg://db/linguala"


@pytest.mark.parametrize(
    "num_bytes,expected",
    [
        (10 * 1024 * 1024, "10MB"),
        (int(1.5 * 1024 * 1024), "1.5MB"),
        (512 * 1024, "512KB"),
        (1024, "1KB"),
        (8, "8 bytes"),
    ],
)
def test_format_size_limit(num_bytes, expected):
    assert format_size_limit(num_bytes) == expected
