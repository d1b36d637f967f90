"""
Tests for application-level behaviour: health, error envelopes, request ids
and CLI commands.
"""

from marketplace.models import Profile


class TestHealth:
    def test_health_check(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'


class TestErrorEnvelope:
    def test_unknown_route(self, client):
        response = client.get('/api/does-not-exist')
        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'error': 'Resource not found'}

    def test_method_not_allowed(self, client):
        response = client.patch('/api/auctions')
        assert response.status_code == 405
        assert response.get_json()['success'] is False


class TestRequestId:
    def test_generated_when_missing(self, client):
        response = client.get('/health')
        assert response.headers['X-Request-ID']

    def test_echoed_when_supplied(self, client):
        response = client.get('/health', headers={'X-Request-ID': 'abc123'})
        assert response.headers['X-Request-ID'] == 'abc123'


class TestCreateAdminCommand:
    def test_creates_admin(self, app, runner):
        result = runner.invoke(args=['create-admin', 'root@example.com', 's3cret-pass'])

        assert result.exit_code == 0
        assert 'root@example.com' in result.output
        profile = Profile.query.filter_by(email='root@example.com').first()
        assert profile.role == 'admin'

    def test_rejects_bad_email(self, app, runner):
        result = runner.invoke(args=['create-admin', 'not-an-email', 'pw'])
        assert result.exit_code != 0
        assert Profile.query.count() == 0
