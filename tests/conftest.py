"""Global test fixtures."""

import os

# Config는 모듈 로드 시점에 읽히므로 테스트 모듈 import 전에 설정한다
os.environ["ENVIRONMENT"] = "testing"

import pytest

from adapters.db.database import DatabaseAdapter
from adapters.external.token_codec import TokenCodecAdapter
from config.adapters import TestingConfig
from tests.fakes import RecordingLogger

TEST_SECRET = b"test_token_secret_key_32_bytes_long__"


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def token_codec(logger):
    return TokenCodecAdapter(TEST_SECRET, logger)


@pytest.fixture
def testing_config(tmp_path):
    """파일 기반 SQLite를 쓰는 테스트 설정 (세션 간 동시성 확인용)"""
    return TestingConfig(database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")


@pytest.fixture
async def db_adapter(testing_config):
    adapter = DatabaseAdapter(testing_config)
    await adapter.initialize()
    await adapter.create_tables()
    yield adapter
    await adapter.close()


@pytest.fixture
async def session(db_adapter):
    async with db_adapter.get_session() as session:
        yield session
