"""Engine and session factory for the referral core."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from referral_core.config.settings import settings


def create_engine_from_settings(url: str | None = None, **kwargs) -> AsyncEngine:
    """Create the async engine, defaulting to DATABASE_URL."""
    return create_async_engine(
        url or settings.database_url,
        echo=settings.database_echo,
        **kwargs,
    )


def create_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create a session maker; sessions keep attributes after commit."""
    if engine is None:
        engine = create_engine_from_settings()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
