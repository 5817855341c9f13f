import pytest
from faker import Faker

import veil.toggle
from veil.toggle import ToggleState


@pytest.fixture(autouse=True)
def fresh_toggle(monkeypatch):
    """Give every test its own process-wide toggle and a clean environment."""
    for var in ("VEIL_DISABLE_REDACTION", "VEIL_CONFIG_PATH", "APP_ENV"):
        monkeypatch.delenv(var, raising=False)
    state = ToggleState()
    monkeypatch.setattr(veil.toggle, "_state", state)
    return state


@pytest.fixture
def fake():
    Faker.seed(4321)
    return Faker()
