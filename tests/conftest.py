"""
Pytest fixtures for pubflow tests.

Each test gets a fresh file-backed SQLite database (stores open one short
session per operation, so an in-memory database would not be shared), an
in-memory storage backend and a workflow registry with the built-ins.
"""

import os
import uuid
from datetime import date
from typing import Awaitable, Callable, Iterable, Optional, Tuple

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./.pubflow-test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("STORAGE_BACKEND", "memory")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pubflow.config import get_settings

get_settings.cache_clear()

from pubflow.database import create_engine_for_url, create_session_maker
from pubflow.jobs.engine import JobEngine
from pubflow.kernel.identity import TokenVerifier
from pubflow.kernel.models import (
    Base,
    SiteRole,
    SiteRoleName,
    SubmissionVersion,
    SystemRole,
    User,
)
from pubflow.kernel.permissions import ScopeService
from pubflow.kernel.stores import ActivityStore, JobStore, SubmissionVersionStore
from pubflow.orchestration import TransitionService
from pubflow.services import Analytics, Notifier
from pubflow.storage import InMemoryStorageBackend, StorageTier
from pubflow.workflow import WorkflowRegistry

SITE = "demo"
PRV_CDN = "https://prv.cdn.test/"
PUB_CDN = "https://pub.cdn.test/"


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a test database engine with all tables."""
    engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'pubflow.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(db_engine)


@pytest.fixture
def storage() -> InMemoryStorageBackend:
    return InMemoryStorageBackend({StorageTier.PRV: PRV_CDN, StorageTier.PUB: PUB_CDN})


@pytest.fixture
def registry() -> WorkflowRegistry:
    return WorkflowRegistry()


@pytest.fixture
def versions(session_maker) -> SubmissionVersionStore:
    return SubmissionVersionStore(session_maker)


@pytest.fixture
def jobs(session_maker) -> JobStore:
    return JobStore(session_maker)


@pytest.fixture
def activity(session_maker) -> ActivityStore:
    return ActivityStore(session_maker)


@pytest.fixture
def notifier() -> Notifier:
    """Notifier with no webhook: logs only."""
    return Notifier()


@pytest.fixture
def analytics() -> Analytics:
    return Analytics()


@pytest.fixture
def job_engine(versions, jobs, activity, storage, notifier, analytics, registry) -> JobEngine:
    return JobEngine(
        versions=versions,
        jobs=jobs,
        activity=activity,
        storage=storage,
        notifier=notifier,
        analytics=analytics,
        registry=registry,
    )


@pytest.fixture
def transition_service(versions, activity, registry, job_engine, notifier, analytics) -> TransitionService:
    return TransitionService(
        versions=versions,
        activity=activity,
        registry=registry,
        scopes=ScopeService(),
        engine=job_engine,
        notifier=notifier,
        analytics=analytics,
    )


UserFactory = Callable[..., Awaitable[User]]


@pytest.fixture
def make_user(session_maker) -> UserFactory:
    """Create a user with optional site roles; returns it with roles loaded."""

    async def _make(
        email: Optional[str] = None,
        system_role: SystemRole = SystemRole.USER,
        site_roles: Iterable[Tuple[str, SiteRoleName]] = (),
    ) -> User:
        user_id = uuid.uuid4()
        async with session_maker() as session:
            session.add(User(
                id=user_id,
                email=email or f"user-{user_id.hex[:8]}@example.com",
                full_name="Test User",
                system_role=system_role.value,
            ))
            for site_name, role in site_roles:
                session.add(SiteRole(user_id=user_id, site_name=site_name, role=role.value))
            await session.commit()
        async with session_maker() as session:
            return await session.get(User, user_id)

    return _make


@pytest_asyncio.fixture
async def editor(make_user) -> User:
    """Editor on the demo site: holds the publishing scopes."""
    return await make_user(email="editor@example.com", site_roles=[(SITE, SiteRoleName.EDITOR)])


@pytest_asyncio.fixture
async def submitter(make_user) -> User:
    """Submitter on the demo site: cannot update or publish submissions."""
    return await make_user(email="submitter@example.com", site_roles=[(SITE, SiteRoleName.SUBMITTER)])


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user(email="admin@example.com", system_role=SystemRole.ADMIN)


VersionFactory = Callable[..., Awaitable[SubmissionVersion]]


@pytest.fixture
def make_version(session_maker) -> VersionFactory:
    """Create a submission version on the demo site."""

    async def _make(
        status: str = "PUBLISHED",
        cdn: Optional[str] = PUB_CDN,
        key: Optional[str] = "k1",
        workflow_name: str = "SIMPLE",
        title: str = "A Study of Things",
        site_name: str = SITE,
        date_published: Optional[date] = None,
    ) -> SubmissionVersion:
        version = SubmissionVersion(
            site_name=site_name,
            workflow_name=workflow_name,
            title=title,
            status=status,
            cdn=cdn,
            cdn_key=key,
            date_published=date_published,
        )
        async with session_maker() as session:
            session.add(version)
            await session.commit()
            await session.refresh(version)
        return version

    return _make


@pytest.fixture
def token_verifier() -> TokenVerifier:
    settings = get_settings()
    return TokenVerifier(settings.secret_key, settings.algorithm)


@pytest.fixture
def auth_headers(token_verifier) -> Callable[[User], dict]:
    """Bearer headers for a user."""

    def _headers(user: User) -> dict:
        token = token_verifier.create_access_token(user.id, user.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers
