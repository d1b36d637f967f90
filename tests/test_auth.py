"""
Tests for authentication functionality.

Tests login, logout, the session identity, and the access decorators.
"""

import pytest
from flask import session

from marketplace.auth import hash_password, verify_password


class TestPasswords:
    def test_hash_round_trip(self):
        hashed = hash_password('s3cret')
        assert hashed != 's3cret'
        assert verify_password('s3cret', hashed)
        assert not verify_password('wrong', hashed)

    @pytest.mark.parametrize('stored', ['', None, 'not-a-bcrypt-hash'])
    def test_malformed_hash_never_matches(self, stored):
        assert verify_password('s3cret', stored) is False


class TestLogin:
    """Tests for the login endpoint."""

    def test_login_with_valid_credentials(self, client, seller, password):
        response = client.post('/api/auth/login', json={
            'email': 'seller@example.com',
            'password': password,
        })

        assert response.status_code == 200
        assert response.get_json()['data']['email'] == 'seller@example.com'
        assert 'password_hash' not in response.get_json()['data']

        with client.session_transaction() as sess:
            assert sess['user_id'] == seller.id
            assert sess['role'] == 'seller'
            assert sess['is_admin'] is False

    def test_admin_login_sets_admin_flag(self, client, admin, password):
        client.post('/api/auth/login', json={'email': 'admin@example.com', 'password': password})
        with client.session_transaction() as sess:
            assert sess['is_admin'] is True

    def test_email_is_case_insensitive(self, client, buyer, password):
        response = client.post('/api/auth/login', json={
            'email': 'Buyer@Example.com',
            'password': password,
        })
        assert response.status_code == 200

    def test_login_with_invalid_password(self, client, buyer):
        response = client.post('/api/auth/login', json={
            'email': 'buyer@example.com',
            'password': 'wrongpassword',
        })

        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid email or password'

        with client.session_transaction() as sess:
            assert 'user_id' not in sess

    def test_login_requires_both_fields(self, client):
        response = client.post('/api/auth/login', json={'email': 'buyer@example.com'})
        assert response.status_code == 400


class TestSession:
    def test_me_returns_profile(self, buyer_client, buyer):
        response = buyer_client.get('/api/auth/me')
        assert response.status_code == 200
        assert response.get_json()['data']['id'] == buyer.id

    def test_me_requires_login(self, client):
        response = client.get('/api/auth/me')
        assert response.status_code == 401
        assert response.get_json() == {'success': False, 'error': 'Login required'}

    def test_logout_clears_session(self, buyer_client):
        with buyer_client:
            response = buyer_client.post('/api/auth/logout')
            assert response.status_code == 200
            assert 'user_id' not in session

        assert buyer_client.get('/api/auth/me').status_code == 401

    def test_csrf_token_endpoint(self, client):
        response = client.get('/api/csrf-token')
        assert response.status_code == 200
        assert response.get_json()['data']['csrfToken']


class TestAccessDecorators:
    """Role checks are applied from the session, never from parameters."""

    def test_admin_required_rejects_spoofed_role_param(self, buyer_client):
        response = buyer_client.get('/api/profiles?role=admin')
        assert response.status_code == 403

    def test_roles_required_lets_both_role_through(self, app, make_profile, forward_form):
        trader = make_profile('trader@example.com', role='both')
        client = app.test_client()
        with client.session_transaction() as sess:
            sess['user_id'] = trader.id
            sess['email'] = trader.email
            sess['role'] = trader.role

        response = client.post('/api/auctions', json=forward_form)

        assert response.status_code == 201
        assert response.get_json()['data']['auction']['createdby'] == 'trader@example.com'
