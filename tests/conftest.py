from __future__ import annotations

import pytest

from app.core.enums import RoleEnum
from app.modules.identity.schemas import Caller
from tests.fakes import Engine, build_engine, make_caller


@pytest.fixture
def engine() -> Engine:
    return build_engine()


@pytest.fixture
def student() -> Caller:
    return make_caller(RoleEnum.STUDENT)


@pytest.fixture
def advisor() -> Caller:
    return make_caller(RoleEnum.ADVISOR)


@pytest.fixture
def admin() -> Caller:
    return make_caller(RoleEnum.ADMIN)
