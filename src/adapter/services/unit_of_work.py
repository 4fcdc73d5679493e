from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.nip_reset_token_repository import NipResetTokenRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern

    Anything not committed when the block exits is rolled back, which also
    releases row locks taken inside it.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        self.nip_reset_tokens = NipResetTokenRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
