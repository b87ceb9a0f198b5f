from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from stakewatch.domain.names import NameResolver
from tests.helpers.activity import FakeNameLookup

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture(autouse=True)
def _isolated_environment(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path_factory: pytest.TempPathFactory,
) -> None:
    monkeypatch.setenv("STAKEWATCH_DATA_DIR", str(tmp_path_factory.mktemp("stakewatch-data")))
    for name in (
        "STAKEWATCH_FEED_HORIZON",
        "STAKEWATCH_LOOKUP_CONCURRENCY",
        "STAKEWATCH_LOOKUP_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def name_lookup() -> FakeNameLookup:
    return FakeNameLookup()


@pytest.fixture
def resolver_factory(name_lookup: FakeNameLookup) -> Callable[[], NameResolver]:
    def factory() -> NameResolver:
        return NameResolver(name_lookup)

    return factory
