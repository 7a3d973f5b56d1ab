from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import validates

# Create the SQLAlchemy instance
db = SQLAlchemy()

USER_ROLES = ('user', 'admin')
USER_STATUSES = ('Active', 'Banned')
DESTINATION_TYPES = ('Beach', 'Mountain', 'City', 'Nature', 'Adventure', 'Honeymoon')
BOOKING_STATUSES = ('Pending', 'Confirmed', 'Cancelled', 'Completed')
PAYMENT_METHODS = ('Credit Card', 'Wallet', 'UPI', 'Net Banking', 'Card + Wallet')


def utc_now_iso():
    """ISO-8601 UTC timestamp; lexical order matches chronological order."""
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


class RecordMixin:
    """Maps wire (camelCase) field names onto column attributes.

    The store works with plain dict records; ``FIELDS`` is the single place
    where a record key is tied to a column.
    """
    FIELDS = {}

    @classmethod
    def column_for(cls, key):
        try:
            return getattr(cls, cls.FIELDS[key])
        except KeyError:
            raise KeyError(f'{cls.__name__} has no field {key!r}')

    def apply(self, record):
        for key, value in record.items():
            if key in self.FIELDS:
                setattr(self, self.FIELDS[key], value)
        return self


class User(RecordMixin, db.Model):
    __tablename__ = 'users'

    FIELDS = {
        'id': 'id',
        'name': 'name',
        'email': 'email',
        'passwordHash': 'password_hash',
        'role': 'role',
        'walletBalance': 'wallet_balance',
        'joinedAt': 'joined_at',
        'avatar': 'avatar',
        'status': 'status',
        'createdAt': 'created_at',
    }

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256))
    role = db.Column(db.String(20), nullable=False, default='user')
    wallet_balance = db.Column(db.Integer, nullable=False, default=0)
    joined_at = db.Column(db.String(10))
    avatar = db.Column(db.String(500))
    status = db.Column(db.String(20), nullable=False, default='Active', index=True)
    created_at = db.Column(db.String(32), default=utc_now_iso, index=True)

    __table_args__ = (
        db.CheckConstraint('wallet_balance >= 0', name='check_wallet_non_negative'),
    )

    @validates('role')
    def validate_role(self, key, value):
        if value not in USER_ROLES:
            raise ValueError(f"Role must be one of {', '.join(USER_ROLES)}")
        return value

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'passwordHash': self.password_hash,
            'role': self.role,
            'walletBalance': self.wallet_balance,
            'joinedAt': self.joined_at,
            'avatar': self.avatar,
            'status': self.status,
            'createdAt': self.created_at
        }

    def __repr__(self):
        return f'<User {self.id}: {self.email}>'


class Destination(RecordMixin, db.Model):
    __tablename__ = 'destinations'

    FIELDS = {
        'id': 'id',
        'name': 'name',
        'country': 'country',
        'description': 'description',
        'price': 'price',
        'priceDisplay': 'price_display',
        'type': 'type',
        'rating': 'rating',
        'reviewsCount': 'reviews_count',
        'image': 'image',
        'gallery': 'gallery',
        'amenities': 'amenities',
        'inclusions': 'inclusions',
        'exclusions': 'exclusions',
        'itinerary': 'itinerary',
        'isFeatured': 'is_featured',
        'createdAt': 'created_at',
    }

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    country = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.Text)
    price = db.Column(db.Float, nullable=False)
    price_display = db.Column(db.String(50))
    type = db.Column(db.String(50), index=True)
    rating = db.Column(db.Float, default=0)
    reviews_count = db.Column(db.Integer, default=0)
    image = db.Column(db.String(500))
    gallery = db.Column(db.JSON)
    amenities = db.Column(db.JSON)
    inclusions = db.Column(db.JSON)
    exclusions = db.Column(db.JSON)
    itinerary = db.Column(db.JSON)
    is_featured = db.Column(db.Boolean, default=False, index=True)
    created_at = db.Column(db.String(32), default=utc_now_iso)

    __table_args__ = (
        db.CheckConstraint('price > 0', name='check_positive_price'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'country': self.country,
            'description': self.description,
            'price': self.price,
            'priceDisplay': self.price_display,
            'type': self.type,
            'rating': self.rating,
            'reviewsCount': self.reviews_count,
            'image': self.image,
            'gallery': self.gallery or [],
            'amenities': self.amenities or [],
            'inclusions': self.inclusions or [],
            'exclusions': self.exclusions or [],
            'itinerary': self.itinerary or [],
            'isFeatured': bool(self.is_featured),
            'createdAt': self.created_at
        }

    def __repr__(self):
        return f'<Destination {self.id}: {self.name}>'


class Booking(RecordMixin, db.Model):
    __tablename__ = 'bookings'

    FIELDS = {
        'id': 'id',
        'userId': 'user_id',
        'customerName': 'customer_name',
        'email': 'email',
        'phone': 'phone',
        'destinationId': 'destination_id',
        'destinationName': 'destination_name',
        'date': 'date',
        'guests': 'guests',
        'totalPrice': 'total_price',
        'pointsUsed': 'points_used',
        'pointsEarned': 'points_earned',
        'status': 'status',
        'paymentMethod': 'payment_method',
        'createdAt': 'created_at',
    }

    id = db.Column(db.String(64), primary_key=True)
    # Plain references: bookings outlive deleted users and destinations
    user_id = db.Column(db.String(64), index=True)
    customer_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(40))
    destination_id = db.Column(db.String(64))
    destination_name = db.Column(db.String(200), nullable=False)
    date = db.Column(db.String(10), nullable=False)
    guests = db.Column(db.Integer, nullable=False, default=1)
    total_price = db.Column(db.Float, nullable=False)
    points_used = db.Column(db.Integer, nullable=False, default=0)
    points_earned = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='Pending', index=True)
    payment_method = db.Column(db.String(40), nullable=False, default='Credit Card')
    created_at = db.Column(db.String(32), default=utc_now_iso, index=True)

    @validates('status')
    def validate_status(self, key, value):
        if value not in BOOKING_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(BOOKING_STATUSES)}")
        return value

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'customerName': self.customer_name,
            'email': self.email,
            'phone': self.phone,
            'destinationId': self.destination_id,
            'destinationName': self.destination_name,
            'date': self.date,
            'guests': self.guests,
            'totalPrice': self.total_price,
            'pointsUsed': self.points_used,
            'pointsEarned': self.points_earned,
            'status': self.status,
            'paymentMethod': self.payment_method,
            'createdAt': self.created_at
        }

    def __repr__(self):
        return f'<Booking {self.id}: {self.status}>'
