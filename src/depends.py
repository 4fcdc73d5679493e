from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.http_identity_directory import HttpIdentityDirectory
from src.adapter.services.smtp_reset_link_sender import SmtpResetLinkSender
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.adapter.services.webhook_notifier import WebhookNotifier
from src.app.services.finalization_notifier import IFinalizationNotifier
from src.app.services.identity_directory import IIdentityDirectory
from src.app.services.reset_link_sender import IResetLinkSender
from src.domain.entities import RequestContext

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_identity_directory() -> IIdentityDirectory:
    return HttpIdentityDirectory(
        base_url=ApplicationConfig.DIRECTORY_BASE_URL,
        api_key=ApplicationConfig.DIRECTORY_API_KEY,
        timeout=ApplicationConfig.DIRECTORY_TIMEOUT_SECONDS,
    )


def get_reset_link_sender() -> IResetLinkSender:
    return SmtpResetLinkSender(
        host=ApplicationConfig.SMTP_HOST,
        port=ApplicationConfig.SMTP_PORT,
        username=ApplicationConfig.SMTP_USERNAME,
        password=ApplicationConfig.SMTP_PASSWORD,
        from_email=ApplicationConfig.SMTP_FROM_EMAIL,
        from_name=ApplicationConfig.SMTP_FROM_NAME,
        start_tls=ApplicationConfig.SMTP_START_TLS,
    )


def get_finalization_notifier() -> IFinalizationNotifier:
    return WebhookNotifier(
        url=ApplicationConfig.WEBHOOK_URL,
        secret=ApplicationConfig.WEBHOOK_SECRET,
        timeout=ApplicationConfig.WEBHOOK_TIMEOUT_SECONDS,
        max_attempts=ApplicationConfig.WEBHOOK_MAX_ATTEMPTS,
        retry_delay=ApplicationConfig.WEBHOOK_RETRY_DELAY_SECONDS,
    )


def get_request_context(request: Request) -> RequestContext:
    """
    Origin metadata of the current request.

    Behind one trusted reverse proxy the rightmost X-Forwarded-For entry is
    the address that proxy saw, earlier entries are client supplied.
    """
    ip = request.client.host if request.client else None
    if ApplicationConfig.TRUST_PROXY:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            ip = forwarded.split(",")[-1].strip() or ip

    user_agent = request.headers.get("user-agent")
    return RequestContext(
        ip=ip[:64] if ip else None,
        user_agent=user_agent[:512] if user_agent else None,
    )
