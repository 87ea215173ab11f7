"""
Integration tests for the dashboard API.

These exercise the list endpoints end to end (fetch, normalize, filter,
sort, paginate), the page reset rule, error envelopes, and the action
endpoints with role checks.  The care backend is replaced by a fake
client patched into the service modules.

To run the tests:

```
pytest -q dashboard/tests
```
"""
from datetime import datetime, timedelta, timezone
from unittest import mock

from django.core.cache import cache
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from ..models import AuditEvent, User
from ..services.backend import BackendError
from .fakes import FakeBackend


def welfare_payloads(n):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [{
        '_id': f'w{i}',
        'createdAt': (base + timedelta(days=i)).isoformat(),
        'guestId': {'userId': {'fullName': f'Resident {i}'}},
        'details': [{
            'status': 'Good' if i % 2 else 'Poor',
            'weekStartDate': (base + timedelta(days=i)).date().isoformat(),
            'weekEndDate': (base + timedelta(days=i)).date().isoformat(),
        }],
    } for i in range(n)]


class DashboardAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.backend = FakeBackend()
        for target in ('dashboard.services.collections.get_client', 'dashboard.services.mutations.get_client'):
            patcher = self._patch(target)
            self.addCleanup(patcher.stop)
        self.viewer = User.objects.create_user(username='viewer1', password='P@ssw0rd1', role='viewer')
        self.staff = User.objects.create_user(username='staff1', password='P@ssw0rd1', role='staff')
        self.manager = User.objects.create_user(username='manager1', password='P@ssw0rd1', role='manager')

    def _patch(self, target):
        patcher = mock.patch(target, return_value=self.backend)
        patcher.start()
        return patcher

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def test_login_returns_token_and_role(self):
        r = self.client.post(reverse('login_view'), {'username': 'staff1', 'password': 'P@ssw0rd1'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data['token'])
        self.assertEqual(r.data['role'], 'staff')
        self.assertTrue(AuditEvent.objects.filter(action='login', user=self.staff).exists())

        self.client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
        self.backend.on('GET', '/incident', [])
        self.assertEqual(self.client.get(reverse('incidents')).status_code, 200)

    def test_login_failure(self):
        r = self.client.post(reverse('login_view'), {'username': 'staff1', 'password': 'wrong'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(r.data['ok'])

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------
    def test_welfare_list_paginates_newest_first(self):
        self.backend.on('GET', '/welfare-check', {'data': welfare_payloads(25)})
        self.client.force_authenticate(self.viewer)

        r = self.client.get(reverse('welfare_checks'))
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.data['ok'])
        self.assertEqual(r.data['pagination'], {'total': 25, 'page': 1, 'pageSize': 10, 'totalPages': 3})
        self.assertEqual([d['id'] for d in r.data['data']], [f'w{i}' for i in range(24, 14, -1)])

        r = self.client.get(reverse('welfare_checks'), {'page': 3})
        self.assertEqual([d['id'] for d in r.data['data']], [f'w{i}' for i in range(4, -1, -1)])

    def test_filter_change_resets_page(self):
        self.backend.on('GET', '/welfare-check', welfare_payloads(25))
        self.client.force_authenticate(self.viewer)

        r = self.client.get(reverse('welfare_checks'), {'page': 2})
        self.assertEqual(r.data['pagination']['page'], 2)
        r = self.client.get(reverse('welfare_checks'), {'page': 2, 'status': 'good'})
        self.assertEqual(r.data['pagination']['page'], 1)
        self.assertEqual(r.data['pagination']['total'], 12)
        self.assertEqual(r.data['filters']['status'], 'good')
        r = self.client.get(reverse('welfare_checks'), {'page': 2, 'status': 'good'})
        self.assertEqual(r.data['pagination']['page'], 2)

    def test_search_and_date_range(self):
        self.backend.on('GET', '/welfare-check', welfare_payloads(25))
        self.client.force_authenticate(self.viewer)
        r = self.client.get(reverse('welfare_checks'), {'search': 'resident 1'})
        # Resident 1, 10..19
        self.assertEqual(r.data['pagination']['total'], 11)

        r = self.client.get(reverse('welfare_checks'), {'dateFrom': '2024-01-03', 'dateTo': '2024-01-04'})
        self.assertEqual(sorted(d['id'] for d in r.data['data']), ['w2', 'w3'])

    def test_bad_query_is_rejected(self):
        self.client.force_authenticate(self.viewer)
        r = self.client.get(reverse('welfare_checks'), {'pageSize': 500})
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.data['ok'])
        r = self.client.get(reverse('welfare_checks'), {'dateFrom': '2024-02-01', 'dateTo': '2024-01-01'})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(self.backend.calls, [])

    def test_bad_query_is_checked_before_fetching(self):
        self.client.force_authenticate(self.viewer)
        for name, path in (('welfare_checks', '/welfare-check'), ('incidents', '/incident'),
                           ('service_users', '/guest'), ('in_transit', '/su-removal/in-transit'),
                           ('other_removals', '/su-removal/other-removals'), ('baskets', '/su-basket')):
            self.backend.on('GET', path, BackendError('down', status_code=500))
            r = self.client.get(reverse(name), {'pageSize': 0})
            self.assertEqual(r.status_code, 400, name)
        self.assertEqual(self.backend.calls, [])

    def test_page_zero_is_an_empty_page(self):
        self.backend.on('GET', '/welfare-check', welfare_payloads(3))
        self.client.force_authenticate(self.viewer)
        self.client.get(reverse('welfare_checks'))
        r = self.client.get(reverse('welfare_checks'), {'page': 0})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['data'], [])
        self.assertEqual(r.data['pagination'], {'total': 3, 'page': 0, 'pageSize': 10, 'totalPages': 1})

    def test_backend_failure_is_a_502_envelope(self):
        self.backend.on('GET', '/incident', BackendError('down', status_code=500))
        self.client.force_authenticate(self.viewer)
        r = self.client.get(reverse('incidents'))
        self.assertEqual(r.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(r.data['error']['code'], 'backend_unavailable')
        self.assertEqual(r.data['error']['message'], 'Error loading data from the care backend.')

    def test_meals_company_change_resets_branch(self):
        self.backend.on('GET', '/meal-marking', [
            {'_id': 'm1', 'branchId': {'_id': 'b1'}, 'details': [{'meals': {'breakfast': {'taken': True}}}]},
            {'_id': 'm2', 'branchId': {'_id': 'b2'}, 'details': []},
        ])
        self.backend.on('GET', '/company', [
            {'_id': 'c1', 'name': 'Acme', 'branches': [{'_id': 'b1', 'name': 'North'}]},
            {'_id': 'c2', 'name': 'Other', 'branches': [{'_id': 'b2', 'name': 'South'}]},
        ])
        self.client.force_authenticate(self.viewer)

        r = self.client.get(reverse('meals'), {'company': 'c1', 'branch': 'b1'})
        self.assertEqual([d['id'] for d in r.data['data']], ['m1'])
        self.assertEqual(r.data['stats'], {'residents': 1, 'breakfast': 1, 'lunch': 0, 'dinner': 0})
        self.assertEqual([b['id'] for b in r.data['options']['branches']], ['b1'])

        r = self.client.get(reverse('meals'), {'company': 'c2', 'branch': 'b1'})
        self.assertEqual(r.data['filters']['branch'], 'all')
        self.assertEqual(r.data['pagination']['total'], 2)
        self.assertEqual([b['id'] for b in r.data['options']['branches']], ['b2'])

    def test_basket_options(self):
        self.backend.on('GET', '/su-basket', [
            {'_id': 'k1', 'branchId': {'name': 'North'}, 'status': 'Requested'},
            {'_id': 'k2', 'branchId': {'name': 'South'}, 'status': 'In Progress'},
            {'_id': 'k3', 'branchId': {'name': 'North'}, 'status': 'Requested'},
        ])
        self.client.force_authenticate(self.viewer)
        r = self.client.get(reverse('baskets'), {'branch': 'North'})
        self.assertEqual(r.data['pagination']['total'], 2)
        self.assertEqual(r.data['options']['branches'], ['all', 'North', 'South'])
        self.assertEqual(r.data['options']['statuses'], ['all', 'Out Of Stock', 'Requested', 'In Progress'])

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def test_viewer_cannot_resolve_incident(self):
        self.client.force_authenticate(self.viewer)
        r = self.client.patch(reverse('resolve_incident', args=['i1']), {'status': 'Resolved'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.backend.calls, [])

    def test_resolve_incident_invalidates_list(self):
        self.backend.on('GET', '/incident', [{'_id': 'i1', 'status': 'Open'}])
        self.backend.on('PATCH', '/incident/i1/resolve', {'success': True})
        self.client.force_authenticate(self.staff)

        self.client.get(reverse('incidents'))
        r = self.client.patch(reverse('resolve_incident', args=['i1']), {'status': 'Resolved'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.data['ok'])

        self.backend.on('GET', '/incident', [{'_id': 'i1', 'status': 'Resolved'}])
        r = self.client.get(reverse('incidents'))
        self.assertEqual(r.data['data'][0]['status'], 'Resolved')
        self.assertEqual(len(self.backend.called('GET', '/incident')), 2)

    def test_mutation_failure_message(self):
        self.backend.on('PATCH', '/incident/i1/resolve',
                        BackendError('x', status_code=422, payload={'message': 'Already closed'}))
        self.client.force_authenticate(self.staff)
        r = self.client.patch(reverse('resolve_incident', args=['i1']), {'status': 'Closed'}, format='json')
        self.assertEqual(r.status_code, 422)
        self.assertEqual(r.data['error'], {'code': 'mutation_failed', 'message': 'Already closed'})

    def test_staff_cannot_approve_removals(self):
        self.client.force_authenticate(self.staff)
        r = self.client.post(reverse('approve_other_removal', args=['r1']))
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_transfer_approval_flow(self):
        self.backend.on('GET', '/su-removal/in-transit', [{
            '_id': 'req-1', 'removalStatus': 'in_transit',
            'branchId': {'_id': 'b-old'}, 'companyId': 'c1',
        }])
        self.backend.on('GET', '/branch/list/by-company',
                        {'branches': [{'_id': 'b-old'}, {'_id': 'b-new', 'name': 'New'}]})
        self.backend.on('GET', '/guest/rooms/capacity',
                        {'success': True, 'data': [{'id': 'r1', 'locationId': 'loc-1'}]})
        self.backend.on('POST', '/su-removal/approve-transfer', {'success': True})
        self.client.force_authenticate(self.manager)

        r = self.client.post(reverse('approve_transfer', args=['req-1']))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data['error']['code'], 'incomplete_selection')

        url = reverse('transfer_selection')
        r = self.client.post(url, {'requestId': 'req-1'}, format='json')
        self.assertEqual([b['id'] for b in r.data['options']['branches']], ['b-new'])
        r = self.client.post(url, {'requestId': 'req-1', 'branchId': 'b-old'}, format='json')
        self.assertEqual(r.status_code, 400)
        r = self.client.post(url, {'requestId': 'req-1', 'branchId': 'b-new', 'roomId': 'r1'}, format='json')
        self.assertTrue(r.data['data']['complete'])

        r = self.client.post(reverse('approve_transfer', args=['req-1']))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(self.client.get(url).data['data']['requestId'], None)

    def test_selection_for_unknown_request(self):
        self.backend.on('GET', '/su-removal/in-transit', [])
        self.client.force_authenticate(self.manager)
        r = self.client.post(reverse('transfer_selection'), {'requestId': 'nope'}, format='json')
        self.assertEqual(r.status_code, 404)

    def test_relocation_endpoints(self):
        self.backend.on('GET', '/guest', [{'_id': 'g1', 'branch': {'_id': 'b1'},
                                           'assignedRooms': [{'_id': 'r1', 'locationId': 'loc-1'}]}])
        self.backend.on('GET', '/location', [{'_id': 'loc-1', 'name': 'Block A', 'branchId': 'b1'}])
        self.backend.on('GET', '/guest/rooms/capacity', {'data': [
            {'id': 'r1', 'locationId': 'loc-1'}, {'id': 'r2', 'locationId': 'loc-1'},
        ]})
        self.backend.on('PATCH', '/guest/g1/relocate', {'success': True})
        self.client.force_authenticate(self.staff)

        r = self.client.get(reverse('relocation_options', args=['g1']), {'locationId': 'loc-1'})
        self.assertEqual(r.data['data']['currentRoomId'], 'r1')
        self.assertEqual([l['id'] for l in r.data['data']['locations']], ['loc-1'])
        self.assertEqual([x['id'] for x in r.data['data']['rooms']], ['r2'])

        r = self.client.post(reverse('relocate', args=['g1']), {'locationId': 'loc-1', 'roomId': 'r2'}, format='json')
        self.assertEqual(r.status_code, 200)
        r = self.client.get(reverse('relocation_options', args=['missing']))
        self.assertEqual(r.status_code, 404)

    def test_signature_rejects_non_png(self):
        self.client.force_authenticate(self.staff)
        r = self.client.post(reverse('save_signature'),
                             {'kind': 'admin', 'signature': 'data:text/plain;base64,aGk='}, format='json')
        self.assertEqual(r.status_code, 400)
        self.assertEqual(self.backend.calls, [])

    def test_room_update(self):
        self.backend.on('PATCH', '/room/r1', {'_id': 'r1', 'capacity': 3})
        self.client.force_authenticate(self.staff)
        r = self.client.patch(reverse('update_room', args=['r1']),
                              {'capacity': 3, 'currentOccupancy': 9}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(self.backend.calls[0][2]['json'], {'capacity': 3})
