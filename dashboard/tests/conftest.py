import pytest
from django.core.cache import cache

from .fakes import FakeBackend


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def backend(monkeypatch):
    fake = FakeBackend()
    monkeypatch.setattr('dashboard.services.collections.get_client', lambda: fake)
    monkeypatch.setattr('dashboard.services.mutations.get_client', lambda: fake)
    return fake
