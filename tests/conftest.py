"""Shared fixtures: an in-memory SQLite database seeded with three users."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime

import pytest
from sqlalchemy import ForeignKey, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from querybuild import FieldCatalog, QueryBuilder


class Base(DeclarativeBase):
    pass


class UserRecord(Base):
    __tablename__ = "test_users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(100))
    age: Mapped[int]
    status: Mapped[str] = mapped_column(String(20))
    created_at: Mapped[datetime] = mapped_column(default=datetime(2024, 1, 1))


class UserTagRecord(Base):
    __tablename__ = "user_tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("test_users.id"))
    tag: Mapped[str] = mapped_column(String(50))


SEED_USERS = [
    {
        "id": id_,
        "name": name,
        "email": email,
        "age": age,
        "status": status,
    }
    for id_, name, email, age, status in [
        (1, "John Doe", "john@example.com", 25, "active"),
        (2, "Jane Smith", "jane@example.com", 30, "inactive"),
        (3, "Bob Johnson", "bob@example.com", 35, "active"),
    ]
]

SEED_TAGS = [
    {"id": 1, "user_id": 1, "tag": "admin"},
    {"id": 2, "user_id": 1, "tag": "staff"},
    {"id": 3, "user_id": 3, "tag": "staff"},
]


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        session.add_all(UserRecord(**row) for row in SEED_USERS)
        session.add_all(UserTagRecord(**row) for row in SEED_TAGS)
        session.commit()
        yield session


@pytest.fixture
def catalog() -> FieldCatalog:
    return FieldCatalog.from_model(UserRecord)


@pytest.fixture
def builder(session: Session) -> QueryBuilder:
    return QueryBuilder(session, UserRecord)
