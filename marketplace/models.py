import uuid
from datetime import datetime

from marketplace import db
from marketplace.utils import utc_now


def generate_id():
    """Opaque identifier for auctions and profiles"""
    return str(uuid.uuid4())


class SerializerMixin:
    """Serialize a row with its lowercase column names"""
    hidden_fields = ()

    def to_dict(self):
        data = {}
        for column in self.__table__.columns:
            if column.name in self.hidden_fields:
                continue
            value = getattr(self, column.name)
            if isinstance(value, datetime):
                value = value.isoformat()
            data[column.name] = value
        return data


class Profile(SerializerMixin, db.Model):
    """Marketplace user; also the identity store for logins"""
    __tablename__ = 'profiles'
    hidden_fields = ('password_hash',)

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(128), nullable=False)
    fname = db.Column(db.String(100), nullable=False)
    lname = db.Column(db.String(100), nullable=False)
    location = db.Column(db.String(255))
    role = db.Column(db.String(20), nullable=False, default='buyer')  # admin, buyer, seller, both
    type = db.Column(db.String(20))  # individual, organization (sellers only)
    organizationname = db.Column(db.String(255))
    organizationcontact = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return f'<Profile {self.email} ({self.role})>'


class Auction(SerializerMixin, db.Model):
    """Auction listing; column names mirror the submitted form keys lowercased"""
    __tablename__ = 'auctions'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    createdby = db.Column(db.String(255), nullable=False, index=True)
    createdat = db.Column(db.DateTime, default=utc_now, nullable=False, index=True)

    # Classification
    auctiontype = db.Column(db.String(20), nullable=False)  # forward, reverse
    auctionsubtype = db.Column(db.String(50), nullable=False)
    categoryid = db.Column(db.String(100), index=True)
    subcategoryid = db.Column(db.String(100))

    # Pricing
    startprice = db.Column(db.Float, default=0)
    targetprice = db.Column(db.Float)
    reserveprice = db.Column(db.Float)
    currentbid = db.Column(db.Float)
    currentbidder = db.Column(db.String(255))
    currency = db.Column(db.String(3), default='USD')
    bidincrementtype = db.Column(db.String(20), default='fixed')
    bidincrementrules = db.Column(db.JSON, default=list)
    minimumincrement = db.Column(db.Float, default=0)
    percent = db.Column(db.Float)

    # Scheduling
    launchtype = db.Column(db.String(20), default='immediate')  # immediate, scheduled
    scheduledstart = db.Column(db.DateTime)
    auctionduration = db.Column(db.JSON)  # {days, hours, minutes}
    status = db.Column(db.String(20), default='active', index=True)
    bidextension = db.Column(db.Boolean, default=False)
    bidextensiontime = db.Column(db.Integer, default=5)
    allowautobidding = db.Column(db.Boolean, default=False)
    issilentauction = db.Column(db.Boolean, default=False)

    # Lifecycle flags
    approved = db.Column(db.Boolean, default=False, nullable=False)
    editable = db.Column(db.Boolean, default=True, nullable=False)
    ended = db.Column(db.Boolean, default=False, nullable=False)

    # Content
    productname = db.Column(db.String(255))
    productdescription = db.Column(db.Text)
    productimages = db.Column(db.JSON, default=list)
    productdocuments = db.Column(db.JSON, default=list)
    productquantity = db.Column(db.Integer)
    attributes = db.Column(db.JSON, default=list)
    specifications = db.Column(db.JSON)
    sku = db.Column(db.String(100))
    brand = db.Column(db.String(100))
    model = db.Column(db.String(100))
    ismultilot = db.Column(db.Boolean, default=False)
    lots = db.Column(db.JSON, default=list)

    # Participation
    participationtype = db.Column(db.String(20), default='public')
    participantemails = db.Column(db.JSON, default=list)
    qualificationcriteria = db.Column(db.JSON, default=list)
    termsandconditions = db.Column(db.JSON, default=list)
    participants = db.Column(db.JSON, default=list)
    questions = db.Column(db.JSON, default=list)
    bidcount = db.Column(db.Integer, default=0, nullable=False)
    language = db.Column(db.String(5), default='en')

    # Reverse auctions only
    requireddocuments = db.Column(db.JSON)

    def __repr__(self):
        return f'<Auction {self.id} {self.auctiontype}/{self.auctionsubtype}>'


class Bid(SerializerMixin, db.Model):
    """Bid history model"""
    __tablename__ = 'bids'

    id = db.Column(db.Integer, primary_key=True)
    auction_id = db.Column(db.String(36), db.ForeignKey('auctions.id'), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return f'<Bid {self.amount} by {self.user_id} on {self.auction_id}>'
