"""Shared fixtures: in-memory database"""
from datetime import date, datetime

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from product_digest.config_loader import DigestSchedule
from product_digest.db.models import Base, SiteRegistry


@pytest.fixture(autouse=True)
def no_env_file(monkeypatch, tmp_path):
    """Read configuration from the process environment only, never from a local .env"""
    monkeypatch.setattr(
        "product_digest.config_loader._env_file_path", lambda: tmp_path / "missing.env"
    )


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory
    await engine.dispose()


@pytest_asyncio.fixture
async def seeded(session_factory):
    """Registry with two sites"""
    async with session_factory() as session:
        session.add_all(
            [
                SiteRegistry(
                    website_key="acme",
                    website_name="Acme",
                    primary_domain="acme.example.com",
                    subdomains=[],
                    category="saas",
                    status="active",
                ),
                SiteRegistry(
                    website_key="axesms",
                    website_name="AxeSMS",
                    primary_domain="sms.kimiaxe.com",
                    subdomains=["api.sms.kimiaxe.com"],
                    category="messaging",
                    status="active",
                ),
            ]
        )
        await session.commit()
    return session_factory


@pytest.fixture
def schedule():
    return DigestSchedule(hour=8, minute=0)


@pytest.fixture
def run_moment():
    """Inside the 08:00 UTC run minute on 2024-06-01"""
    return datetime(2024, 6, 1, 8, 0, 15)


@pytest.fixture
def reference_day():
    return date(2024, 6, 1)
