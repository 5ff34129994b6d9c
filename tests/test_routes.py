"""
Tests for the store, health, landing page and fallback routes.
"""

import pytest


def send(client, auth_headers, subject='x'):
    return client.post('/', headers=auth_headers, data={
        'Action': 'SendEmail', 'Source': 'a@example.com', 'Message.Subject.Data': subject,
    })


class TestStoreRoutes:

    def test_empty_store(self, client):
        resp = client.get('/store')

        assert resp.status_code == 200
        assert resp.get_json() == {'emails': []}

    def test_each_send_adds_exactly_one(self, client, auth_headers):
        previous_max = 0
        for n in range(1, 4):
            send(client, auth_headers)
            emails = client.get('/store').get_json()['emails']
            assert len(emails) == n
            assert emails[-1]['at'] >= previous_max
            previous_max = max(e['at'] for e in emails)

    def test_clear_store(self, client, auth_headers):
        send(client, auth_headers)
        send(client, auth_headers)

        resp = client.post('/clear-store')

        assert resp.status_code == 200
        assert resp.get_json() == {'message': 'Emails cleared'}
        assert client.get('/store').get_json() == {'emails': []}

    def test_clear_empty_store(self, client):
        assert client.post('/clear-store').status_code == 200
        assert client.get('/store').get_json() == {'emails': []}

    def test_since_filters_by_at(self, client, auth_headers, clock):
        clock.now = 100
        send(client, auth_headers, 'first')
        clock.now = 200
        send(client, auth_headers, 'second')
        clock.now = 300
        send(client, auth_headers, 'third')

        subjects = [e['subject'] for e in client.get('/store?since=200').get_json()['emails']]
        assert subjects == ['second', 'third']

        assert client.get('/store?since=301').get_json() == {'emails': []}
        assert len(client.get('/store?since=-5').get_json()['emails']) == 3

    def test_empty_since_returns_everything(self, client, auth_headers):
        send(client, auth_headers)
        assert len(client.get('/store?since=').get_json()['emails']) == 1

    @pytest.mark.parametrize("query", ['abc', '12.5', '007', '1e3', ' 5', '+5'])
    def test_non_integer_since_is_400(self, client, query):
        resp = client.get('/store', query_string={'since': query})

        assert resp.status_code == 400
        assert 'expected integer' in resp.get_json()['message']

    def test_repeated_since_is_400(self, client):
        resp = client.get('/store?since=1&since=2')

        assert resp.status_code == 400
        assert resp.get_json()['message'] == 'Bad since query param, expected single value'


class TestServiceRoutes:

    def test_health_check(self, client):
        resp = client.get('/health-check')

        assert resp.status_code == 200
        assert resp.data == b''

    def test_landing_page(self, client):
        resp = client.get('/')

        assert resp.status_code == 200
        assert b'SES Mock' in resp.data


class TestFallback:

    def test_unknown_path(self, client, auth_headers):
        resp = client.get('/v1/whatever', headers=auth_headers)

        assert resp.status_code == 404
        assert resp.data == b'<UnknownOperationException/>'

    def test_wrong_method_on_known_path(self, client, auth_headers):
        resp = client.get('/v2/email/outbound-emails', headers=auth_headers)

        assert resp.status_code == 404
        assert resp.data == b'<UnknownOperationException/>'
