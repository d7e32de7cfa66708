"""
FastAPI dependencies for authentication, stores and services.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pubflow.config import Settings, get_settings
from pubflow.database import get_session_maker
from pubflow.exceptions import AuthenticationRequired
from pubflow.jobs.engine import JobEngine
from pubflow.kernel.identity import TokenVerifier
from pubflow.kernel.models.user import User
from pubflow.kernel.permissions import ScopeService
from pubflow.kernel.stores import ActivityStore, JobStore, SubmissionVersionStore
from pubflow.orchestration import TransitionService
from pubflow.services import Analytics, Notifier
from pubflow.storage import StorageBackend
from pubflow.workflow import WorkflowRegistry

# Security scheme
security = HTTPBearer(auto_error=False)

SessionMaker = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_maker)]
AppSettings = Annotated[Settings, Depends(get_settings)]


async def get_current_user_optional(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    session_maker: SessionMaker,
    settings: AppSettings,
) -> Optional[User]:
    """Current user if the bearer token is valid, None otherwise."""
    if not credentials:
        return None

    payload = TokenVerifier(settings.secret_key, settings.algorithm).verify_access_token(
        credentials.credentials
    )
    if not payload:
        return None

    async with session_maker() as session:
        user = await session.get(User, payload.sub)
    if not user or not user.is_active:
        return None
    return user


async def get_current_user(user: Annotated[Optional[User], Depends(get_current_user_optional)]) -> User:
    """Current user or 401."""
    if user is None:
        raise AuthenticationRequired("User is not authenticated")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_current_user_optional)]


def get_registry(request: Request) -> WorkflowRegistry:
    """Workflow catalog owned by the application (see pubflow.main)."""
    return request.app.state.workflows


def get_storage(request: Request) -> Optional[StorageBackend]:
    return request.app.state.storage


Registry = Annotated[WorkflowRegistry, Depends(get_registry)]
Storage = Annotated[Optional[StorageBackend], Depends(get_storage)]


def get_notifier(settings: AppSettings) -> Notifier:
    return Notifier(settings.slack_webhook_url, timeout=settings.side_effect_timeout_seconds)


def get_analytics(settings: AppSettings) -> Analytics:
    return Analytics(settings.analytics_url, timeout=settings.side_effect_timeout_seconds)


def get_version_store(session_maker: SessionMaker) -> SubmissionVersionStore:
    return SubmissionVersionStore(session_maker)


def get_job_store(session_maker: SessionMaker) -> JobStore:
    return JobStore(session_maker)


VersionStore = Annotated[SubmissionVersionStore, Depends(get_version_store)]
Jobs = Annotated[JobStore, Depends(get_job_store)]


def get_job_engine(
    versions: VersionStore,
    jobs: Jobs,
    session_maker: SessionMaker,
    storage: Storage,
    registry: Registry,
    notifier: Annotated[Notifier, Depends(get_notifier)],
    analytics: Annotated[Analytics, Depends(get_analytics)],
) -> JobEngine:
    return JobEngine(
        versions=versions,
        jobs=jobs,
        activity=ActivityStore(session_maker),
        storage=storage,
        notifier=notifier,
        analytics=analytics,
        registry=registry,
    )


Engine = Annotated[JobEngine, Depends(get_job_engine)]


def get_transition_service(engine: Engine) -> TransitionService:
    return TransitionService(
        versions=engine.versions,
        activity=engine.activity,
        registry=engine.registry,
        scopes=ScopeService(),
        engine=engine,
        notifier=engine.notifier,
        analytics=engine.analytics,
    )


Transitions = Annotated[TransitionService, Depends(get_transition_service)]
