import os

# Must be set before config.settings is first imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GPS_TCP_ENABLED", "false")
os.environ.setdefault("PROD", "false")

from typing import List

import pytest
from sqlalchemy.orm import sessionmaker

from database.db_conf import build_engine, init_db
from database.schemas import CommandRecordCreate
from database.store import SQLAlchemyStore, StoreError


class FakeStore:
    def __init__(self) -> None:
        self.records: List[CommandRecordCreate] = []

    def save(self, record: CommandRecordCreate) -> int:
        self.records.append(record)
        return len(self.records)


class FailingStore:
    def __init__(self) -> None:
        self.attempts = 0

    def save(self, record: CommandRecordCreate) -> int:
        self.attempts += 1
        raise StoreError("database unavailable")


class FakeSocket:
    def __init__(self) -> None:
        self.options = {}

    def setsockopt(self, level, option, value) -> None:
        self.options[(level, option)] = value


class FakeTransport:
    def __init__(self, peername=("10.0.0.5", 40000), sock=None) -> None:
        self.peername = peername
        self.sock = sock
        self.written: List[bytes] = []
        self.closed = False

    def get_extra_info(self, name, default=None):
        if name == "peername":
            return self.peername
        if name == "socket":
            return self.sock
        return default

    def write(self, data: bytes) -> None:
        self.written.append(data)

    def close(self) -> None:
        self.closed = True

    def is_closing(self) -> bool:
        return self.closed


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def sql_store() -> SQLAlchemyStore:
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    yield SQLAlchemyStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    engine.dispose()
