"""
Tests for the AuctionService.

Tests creation validation, approval scheduling, and the deletion cascade.
"""

from datetime import timedelta

import pytest

from marketplace import db
from marketplace.models import Auction, Bid
from marketplace.services.auction_service import AuctionService
from marketplace.services.base import NotFoundError, ServiceError, ValidationError
from marketplace.utils import parse_timestamp, utc_now


class TestCreateAuction:
    """Test suite for auction creation."""

    @pytest.fixture
    def service(self):
        return AuctionService()

    def test_forward_auction_created_pending(self, app, service, forward_form):
        row = service.create_auction(forward_form, 'seller@example.com')

        assert row['approved'] is False
        assert row['editable'] is True
        assert row['status'] == 'active'
        assert row['currentbid'] == 100
        assert row['bidcount'] == 0
        assert row['participants'] == []
        assert row['createdby'] == 'seller@example.com'
        assert row['minimumincrement'] == 10
        assert db.session.get(Auction, row['id']) is not None

    def test_creator_email_normalized(self, app, service, forward_form):
        row = service.create_auction(forward_form, '  Seller@Example.COM ')
        assert row['createdby'] == 'seller@example.com'
        assert service.auction_repo.count_by_creator('SELLER@example.com') == 1

    def test_immediate_start_is_creation_time(self, app, service, forward_form):
        before = utc_now()
        row = service.create_auction(forward_form, 'seller@example.com')
        start = parse_timestamp(row['scheduledstart'])
        assert before <= start <= utc_now()

    def test_scheduled_start_persisted_verbatim(self, app, service, forward_form):
        start = (utc_now() + timedelta(days=2)).replace(microsecond=0)
        forward_form.update({'launchType': 'scheduled', 'scheduledStart': start.isoformat() + 'Z'})

        row = service.create_auction(forward_form, 'seller@example.com')

        assert row['status'] == 'scheduled'
        assert parse_timestamp(row['scheduledstart']) == start

    @pytest.mark.parametrize('scheduled_start', [None, '', 'next tuesday'])
    def test_scheduled_requires_valid_start(self, app, service, forward_form, scheduled_start):
        forward_form.update({'launchType': 'scheduled', 'scheduledStart': scheduled_start})
        with pytest.raises(ValidationError, match='Scheduled start time is required'):
            service.create_auction(forward_form, 'seller@example.com')
        assert Auction.query.count() == 0

    def test_scheduled_start_in_past_rejected(self, app, service, forward_form):
        past = utc_now() - timedelta(hours=1)
        forward_form.update({'launchType': 'scheduled', 'scheduledStart': past.isoformat()})
        with pytest.raises(ValidationError, match='in the future'):
            service.create_auction(forward_form, 'seller@example.com')

    def test_missing_type_rejected_first(self, app, service):
        with pytest.raises(ValidationError) as exc:
            service.create_auction({'productName': 'x'}, 'seller@example.com')
        assert exc.value.message == 'Auction type and subtype are required'

    def test_invalid_auction_type(self, app, service, forward_form):
        forward_form['auctionType'] = 'sideways'
        with pytest.raises(ValidationError, match='forward or reverse'):
            service.create_auction(forward_form, 'seller@example.com')

    def test_single_lot_requires_product_name(self, app, service, forward_form):
        forward_form['productName'] = '  '
        with pytest.raises(ValidationError) as exc:
            service.create_auction(forward_form, 'seller@example.com')
        assert exc.value.message == 'Product name is required for single lot auctions'

    def test_multi_lot_requires_lots(self, app, service, forward_form):
        forward_form.update({'isMultiLot': True, 'productName': '', 'lots': []})
        with pytest.raises(ValidationError) as exc:
            service.create_auction(forward_form, 'seller@example.com')
        assert exc.value.message == 'At least one lot is required for multi-lot auctions'

    def test_multi_lot_with_complete_lots(self, app, service, forward_form):
        lots = [{
            'id': 'lot-1', 'name': 'Lens', 'description': '50mm prime',
            'quantity': 1, 'startPrice': 40, 'minimumIncrement': 5,
        }]
        forward_form.update({'isMultiLot': True, 'productName': '', 'lots': lots})
        row = service.create_auction(forward_form, 'seller@example.com')
        assert row['ismultilot'] is True
        assert row['lots'] == lots

    def test_incomplete_lot_rejected(self, app, service, forward_form):
        lots = [{'name': 'Lens', 'description': '', 'startPrice': 40, 'minimumIncrement': 5}]
        forward_form.update({'isMultiLot': True, 'lots': lots})
        with pytest.raises(ValidationError, match='each lot'):
            service.create_auction(forward_form, 'seller@example.com')

    def test_yankee_forces_fixed_zero(self, app, service, forward_form):
        forward_form.update({
            'auctionSubType': 'yankee',
            'productQuantity': 10,
            'bidIncrementType': 'percentage',
            'bidIncrementRules': [{'incrementValue': 50}],
        })
        row = service.create_auction(forward_form, 'seller@example.com')
        assert row['bidincrementtype'] == 'fixed'
        assert row['minimumincrement'] == 0
        assert row['bidincrementrules'] == []

    def test_invalid_increment_writes_nothing(self, app, service, forward_form):
        forward_form['bidIncrementRules'] = [{'incrementValue': 0}]
        with pytest.raises(ValidationError):
            service.create_auction(forward_form, 'seller@example.com')
        assert Auction.query.count() == 0

    def test_reverse_auction_parses_documents(self, app, service, reverse_form):
        row = service.create_auction(reverse_form, 'seller@example.com')
        assert row['auctiontype'] == 'reverse'
        assert row['targetprice'] == 500
        assert row['currentbid'] == 500
        assert row['requireddocuments'] == [
            {'name': 'Company registration'},
            {'name': 'Tax certificate'},
        ]

    def test_reverse_accepts_document_list(self, app, service, reverse_form):
        reverse_form['requireddocuments'] = [{'name': 'ISO 9001'}]
        row = service.create_auction(reverse_form, 'seller@example.com')
        assert row['requireddocuments'] == [{'name': 'ISO 9001'}]

    @pytest.mark.parametrize('documents', [
        None, 'not json', '{"name": "x"}', '[]', '[{"name": ""}]', '[{"title": "x"}]',
    ])
    def test_reverse_rejects_bad_documents(self, app, service, reverse_form, documents):
        reverse_form['requireddocuments'] = documents
        with pytest.raises(ValidationError):
            service.create_auction(reverse_form, 'seller@example.com')
        assert Auction.query.count() == 0

    @pytest.mark.parametrize('target', [None, 0, -10, 'abc'])
    def test_reverse_requires_positive_target(self, app, service, reverse_form, target):
        reverse_form['targetPrice'] = target
        with pytest.raises(ValidationError, match='Target price'):
            service.create_auction(reverse_form, 'seller@example.com')

    def test_invalid_launch_type(self, app, service, forward_form):
        forward_form['launchType'] = 'eventually'
        with pytest.raises(ValidationError, match='Launch type'):
            service.create_auction(forward_form, 'seller@example.com')

    def test_uploaded_images_stored_as_urls(self, app, service, forward_form):
        forward_form['productImages'] = [
            {'id': 'a', 'name': 'front.jpg', 'url': '/uploads/public/1_front.jpg'},
            '/uploads/public/2_back.jpg',
        ]
        row = service.create_auction(forward_form, 'seller@example.com')
        assert row['productimages'] == [
            '/uploads/public/1_front.jpg',
            '/uploads/public/2_back.jpg',
        ]


class TestApproveAuction:
    """Test suite for approval scheduling."""

    @pytest.fixture
    def service(self):
        return AuctionService()

    def test_immediate_starts_at_approval(self, app, service, make_auction):
        auction = make_auction(scheduledstart=utc_now() - timedelta(days=3))
        before = utc_now()

        row = service.approve_auction(auction.id)

        assert row['approved'] is True
        assert parse_timestamp(row['scheduledstart']) >= before

    def test_future_scheduled_start_kept(self, app, service, make_auction):
        future = (utc_now() + timedelta(days=1)).replace(microsecond=0)
        auction = make_auction(launchtype='scheduled', status='scheduled', scheduledstart=future)

        row = service.approve_auction(auction.id)

        assert parse_timestamp(row['scheduledstart']) == future

    def test_past_scheduled_start_reset(self, app, service, make_auction):
        past = utc_now() - timedelta(hours=2)
        auction = make_auction(launchtype='scheduled', status='scheduled', scheduledstart=past)
        before = utc_now()

        row = service.approve_auction(auction.id)

        assert parse_timestamp(row['scheduledstart']) >= before

    def test_missing_scheduled_start_reset(self, app, service, make_auction):
        auction = make_auction(launchtype='scheduled', status='scheduled', scheduledstart=None)
        row = service.approve_auction(auction.id)
        assert row['scheduledstart'] is not None

    def test_second_approval_keeps_start(self, app, service, make_auction):
        auction = make_auction()
        first = service.approve_auction(auction.id)
        second = service.approve_auction(auction.id)
        assert second['scheduledstart'] == first['scheduledstart']
        assert second['approved'] is True

    def test_unknown_auction(self, app, service):
        with pytest.raises(NotFoundError):
            service.approve_auction('missing')


class TestDeleteAuction:
    """Test suite for rejection with the bid cascade."""

    @pytest.fixture
    def service(self):
        return AuctionService()

    def test_deletes_auction_and_bids(self, app, service, make_auction, make_bid, buyer):
        auction = make_auction()
        other = make_auction(productname='Other')
        make_bid(auction, buyer, 110)
        make_bid(auction, buyer, 120)
        make_bid(other, buyer, 110)
        auction_id, other_id = auction.id, other.id

        result = service.delete_auction(auction_id)

        assert result['bids_removed'] == 2
        assert db.session.get(Auction, auction_id) is None
        assert Bid.query.filter_by(auction_id=auction_id).count() == 0
        assert Bid.query.filter_by(auction_id=other_id).count() == 1

    def test_unknown_auction(self, app, service):
        with pytest.raises(NotFoundError):
            service.delete_auction('missing')

    @pytest.mark.parametrize('repo_name, method', [
        ('bid_repo', 'delete_for_auction'),
        ('auction_repo', 'delete'),
    ])
    def test_failed_step_keeps_auction_and_bids(
        self, app, service, make_auction, make_bid, buyer, monkeypatch, repo_name, method
    ):
        auction = make_auction()
        make_bid(auction, buyer, 110)
        make_bid(auction, buyer, 120)
        auction_id = auction.id

        def fail(*args, **kwargs):
            raise RuntimeError('connection lost')

        monkeypatch.setattr(getattr(service, repo_name), method, fail)

        with pytest.raises(ServiceError):
            service.delete_auction(auction_id)

        assert db.session.get(Auction, auction_id) is not None
        assert Bid.query.filter_by(auction_id=auction_id).count() == 2


class TestQueries:
    @pytest.fixture
    def service(self):
        return AuctionService()

    def test_detail_includes_minimum_next_bid(self, app, service, make_auction):
        auction = make_auction(currentbid=150)
        row = service.get_auction(auction.id)
        assert row['minimumnextbid'] == 160

    def test_detail_reverse_moves_down(self, app, service, make_auction):
        auction = make_auction(auctiontype='reverse', startprice=0, targetprice=500, currentbid=500)
        assert service.get_auction(auction.id)['minimumnextbid'] == 490

    def test_list_newest_first_with_pagination(self, app, service, make_auction):
        now = utc_now()
        for index in range(3):
            make_auction(productname=f'Item {index}', createdat=now + timedelta(minutes=index))

        result = service.list_auctions(page=1, limit=2)

        assert [row['productname'] for row in result['auctions']] == ['Item 2', 'Item 1']
        assert result['pagination'] == {'page': 1, 'limit': 2, 'total': 3, 'totalPages': 2}

    def test_list_filters(self, app, service, make_auction):
        make_auction(categoryid='art')
        make_auction(categoryid='art', auctiontype='reverse', approved=True)
        make_auction(categoryid='cars')

        assert service.list_auctions(category='art')['pagination']['total'] == 2
        assert service.list_auctions(auction_type='reverse')['pagination']['total'] == 1
        assert service.list_auctions(approved=False)['pagination']['total'] == 2
