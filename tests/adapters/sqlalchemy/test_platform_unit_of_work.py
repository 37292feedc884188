from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.exc import IntegrityError

from tests.helpers.platform_wells import CREATED, UPDATED
from wellsync.adapters.sqlalchemy import unit_of_work as uow_module
from wellsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyPlatformWellUnitOfWork,
    StartupError,
    configured_engine,
    shutdown,
    startup,
    store_stats,
)
from wellsync.domain.model import Platform, Well

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine

    UnitOfWorkFactory = Callable[[], SqlAlchemyPlatformWellUnitOfWork]


def _platform(platform_id: int) -> Platform:
    return Platform(
        id=platform_id,
        name=f"PLATFORM-{platform_id}",
        latitude=1.5,
        longitude=104.5,
        created_at=CREATED,
        updated_at=UPDATED,
    )


def _well(well_id: int, platform_id: int) -> Well:
    return Well(
        id=well_id,
        platform_id=platform_id,
        name=f"WELL-{well_id}",
        latitude=1.0,
        longitude=103.0,
        created_at=CREATED,
        updated_at=UPDATED,
    )


def test_unit_of_work_requires_startup() -> None:
    shutdown()

    with pytest.raises(StartupError):
        SqlAlchemyPlatformWellUnitOfWork()


def test_startup_refuses_to_reconfigure_without_force(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    try:
        with pytest.raises(StartupError):
            startup(engine=sqlite_engine)
        assert configured_engine() is sqlite_engine
        assert uow_module.is_started()
    finally:
        shutdown()

    assert configured_engine() is None


def test_repositories_need_an_open_session(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_commit_persists_both_tables(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.platforms.add(_platform(1))
        uow.flush()
        uow.repositories.wells.add(_well(11, 1))
        uow.commit()

    stats = store_stats()
    assert (stats.platforms, stats.wells) == (1, 1)


def test_leaving_without_commit_discards_changes(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.platforms.add(_platform(1))
        uow.flush()

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.platforms.count() == 0


def test_exception_rolls_back_platforms_and_wells(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    with pytest.raises(IntegrityError), sqlite_unit_of_work() as uow:
        uow.repositories.platforms.add(_platform(1))
        uow.flush()
        uow.repositories.wells.add(_well(11, 1))
        uow.repositories.wells.add(_well(12, 999))
        uow.flush()

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.platforms.count() == 0
        assert uow.repositories.wells.count() == 0
