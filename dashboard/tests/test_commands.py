from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from dashboard.models import User
from dashboard.services import collections
from dashboard.services.backend import BackendError


def run(*args):
    out, err = StringIO(), StringIO()
    call_command(*args, stdout=out, stderr=err)
    return out.getvalue(), err.getvalue()


def test_refresh_bumps_generations_and_broadcasts(backend, monkeypatch):
    sent = []
    monkeypatch.setattr(collections, 'notify_refresh', lambda names: sent.append(list(names)))

    out, _ = run('refresh_collections', 'incidents', 'baskets')
    assert collections.generation('incidents') == 1
    assert collections.generation('baskets') == 1
    assert collections.generation('welfare-checks') == 0
    assert sent == [['incidents', 'baskets']]
    assert 'Refreshed 2 collections (0 warmed)' in out
    assert backend.calls == []


def test_refresh_all_by_default(backend, monkeypatch):
    monkeypatch.setattr(collections, 'notify_refresh', lambda names: None)
    run('refresh_collections')
    assert all(collections.generation(name) == 1 for name in collections.COLLECTIONS)


def test_warm_fetches_plain_collections_and_reports_failures(backend, monkeypatch):
    monkeypatch.setattr(collections, 'notify_refresh', lambda names: None)
    backend.on('GET', '/incident', [{'_id': 'i1'}, {'_id': 'i2'}])
    backend.on('GET', '/su-basket', BackendError('down', status_code=500))

    out, err = run('refresh_collections', 'incidents', 'baskets', 'rooms-capacity', '--warm')
    assert 'incidents: 2 items' in out
    assert 'could not fetch baskets' in err
    assert '(1 warmed)' in out
    assert backend.called('GET', '/guest/rooms/capacity') == []
    assert collections.load('incidents') == [{'_id': 'i1'}, {'_id': 'i2'}]
    assert len(backend.called('GET', '/incident')) == 1


def test_unknown_collection_is_rejected(backend):
    with pytest.raises(CommandError):
        run('refresh_collections', 'nope')


@pytest.mark.django_db
def test_ensure_test_users_is_idempotent():
    run('ensure_test_users')
    run('ensure_test_users')
    assert sorted(User.objects.values_list('role', flat=True)) == ['admin', 'manager', 'staff', 'viewer']
    assert User.objects.get(username='staff1').check_password('123456')
