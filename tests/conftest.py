"""
Pytest fixtures for auction marketplace tests.

Provides fixtures for app, clients logged in under each role, and
factories for sample profiles, auctions and bids.
"""

from datetime import timedelta

import pytest

from marketplace import create_app, db
from marketplace.auth import hash_password
from marketplace.models import Auction, Bid, Profile
from marketplace.utils import utc_now

TEST_PASSWORD = 'correct-horse-battery'


@pytest.fixture
def app(tmp_path):
    """Create application for testing with fresh database."""
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Test client for making requests."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """Test CLI runner."""
    return app.test_cli_runner()


@pytest.fixture(scope='session')
def password_hash():
    """One bcrypt hash shared by every sample profile."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def make_profile(app, password_hash):
    """Factory creating a profile row and returning it."""
    def _make(email, role='buyer', **kwargs):
        fields = {
            'fname': email.split('@')[0].title(),
            'lname': 'Tester',
            'type': 'individual' if role in ('seller', 'both') else None,
        }
        fields.update(kwargs)
        profile = Profile(email=email, password_hash=password_hash, role=role, **fields)
        db.session.add(profile)
        db.session.commit()
        return profile
    return _make


@pytest.fixture
def admin(make_profile):
    return make_profile('admin@example.com', role='admin')


@pytest.fixture
def seller(make_profile):
    return make_profile('seller@example.com', role='seller')


@pytest.fixture
def buyer(make_profile):
    return make_profile('buyer@example.com', role='buyer')


def _login(app, profile):
    client = app.test_client()
    with client.session_transaction() as session:
        session['user_id'] = profile.id
        session['email'] = profile.email
        session['role'] = profile.role
        session['is_admin'] = profile.role == 'admin'
    return client


@pytest.fixture
def admin_client(app, admin):
    """Test client with an admin session."""
    return _login(app, admin)


@pytest.fixture
def seller_client(app, seller):
    """Test client with a seller session."""
    return _login(app, seller)


@pytest.fixture
def buyer_client(app, buyer):
    """Test client with a buyer session."""
    return _login(app, buyer)


@pytest.fixture
def make_auction(app):
    """Factory inserting an auction row directly, bypassing validation."""
    def _make(createdby='seller@example.com', **kwargs):
        fields = {
            'auctiontype': 'forward',
            'auctionsubtype': 'english',
            'productname': 'Vintage Camera',
            'startprice': 100.0,
            'currentbid': 100.0,
            'bidincrementtype': 'fixed',
            'bidincrementrules': [{
                'id': 'rule-1',
                'minBidAmount': 0,
                'maxBidAmount': None,
                'incrementValue': 10,
                'incrementType': 'fixed',
            }],
            'minimumincrement': 10.0,
            'launchtype': 'immediate',
            'scheduledstart': utc_now(),
            'status': 'active',
            'auctionduration': {'days': 1, 'hours': 0, 'minutes': 0},
        }
        fields.update(kwargs)
        auction = Auction(createdby=createdby, **fields)
        db.session.add(auction)
        db.session.commit()
        return auction
    return _make


@pytest.fixture
def make_bid(app):
    """Factory inserting a bid; later calls get later timestamps."""
    counter = {'n': 0}

    def _make(auction, profile, amount):
        counter['n'] += 1
        bid = Bid(
            auction_id=auction.id,
            user_id=profile.id,
            amount=amount,
            created_at=utc_now() + timedelta(seconds=counter['n']),
        )
        db.session.add(bid)
        db.session.commit()
        return bid
    return _make


@pytest.fixture
def forward_form():
    """A valid single-lot forward auction as the wizard submits it."""
    return {
        'auctionType': 'forward',
        'auctionSubType': 'english',
        'productName': 'Vintage Camera',
        'productDescription': 'A 1970s rangefinder in working order',
        'categoryId': 'electronics',
        'startPrice': 100,
        'currency': 'USD',
        'launchType': 'immediate',
        'auctionDuration': {'days': 1, 'hours': 0, 'minutes': 0},
        'bidIncrementType': 'fixed',
        'bidIncrementRules': [{'id': 'rule-1', 'minBidAmount': 0, 'incrementValue': 10}],
        'isMultiLot': False,
        'lots': [],
    }


@pytest.fixture
def reverse_form(forward_form):
    """A valid reverse auction form."""
    form = dict(forward_form)
    form.update({
        'auctionType': 'reverse',
        'auctionSubType': 'standard',
        'targetPrice': 500,
        'requireddocuments': '[{"name": "Company registration"}, {"name": "Tax certificate"}]',
    })
    return form


@pytest.fixture
def password():
    """Plain-text password of every sample profile."""
    return TEST_PASSWORD
