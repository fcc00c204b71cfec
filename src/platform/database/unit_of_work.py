"""
Unit of Work: one database transaction shared by the booking repositories.

- The UoW owns the session's commit / rollback
- Repositories get the shared session from the UoW
- Leaving the block without commit() rolls everything back
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.orm_db_setting import get_async_session


if TYPE_CHECKING:
    from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
    from src.service.booking.app.interface.i_booking_lock_command_repo import (
        IBookingLockCommandRepo,
    )
    from src.service.booking.app.interface.i_package_subscription_command_repo import (
        IPackageSubscriptionCommandRepo,
    )
    from src.service.booking.app.interface.i_service_query_repo import IServiceQueryRepo
    from src.service.booking.app.interface.i_slot_command_repo import ISlotCommandRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Usage:
        async with uow:
            slot = await uow.slots.get_for_update(slot_id=...)
            await uow.booking_locks.create(lock=...)
            await uow.commit()
    """

    slots: ISlotCommandRepo
    booking_locks: IBookingLockCommandRepo
    bookings: IBookingCommandRepo
    services: IServiceQueryRepo
    package_subscriptions: IPackageSubscriptionCommandRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        from src.service.booking.driven_adapter.repo.booking_command_repo_impl import (
            BookingCommandRepoImpl,
        )
        from src.service.booking.driven_adapter.repo.booking_lock_command_repo_impl import (
            BookingLockCommandRepoImpl,
        )
        from src.service.booking.driven_adapter.repo.package_subscription_command_repo_impl import (
            PackageSubscriptionCommandRepoImpl,
        )
        from src.service.booking.driven_adapter.repo.service_query_repo_impl import (
            ServiceQueryRepoImpl,
        )
        from src.service.booking.driven_adapter.repo.slot_command_repo_impl import (
            SlotCommandRepoImpl,
        )

        self.slots = SlotCommandRepoImpl(session=self.session)
        self.booking_locks = BookingLockCommandRepoImpl(session=self.session)
        self.bookings = BookingCommandRepoImpl(session=self.session)
        self.services = ServiceQueryRepoImpl(session=self.session)
        self.package_subscriptions = PackageSubscriptionCommandRepoImpl(session=self.session)

        return await super().__aenter__()

    async def _commit(self):
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


def get_unit_of_work(
    session: AsyncSession = Depends(get_async_session),
) -> AbstractUnitOfWork:
    return SqlAlchemyUnitOfWork(session)
