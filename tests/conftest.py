from __future__ import annotations

import pytest

from tests.fakes import FakeClock, FakeUpstream, RecordingSleep


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()
