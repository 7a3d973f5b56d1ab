"""Booking creation and the wallet reconciliation that goes with it.

A confirmed booking owned by a registered user redeems ``pointsUsed`` from
the user's wallet and credits ``floor(totalPrice * reward_rate)`` back to it.
Pending (reserve now, pay later) bookings neither redeem nor earn until an
admin confirms them. The balance update and the booking insert always commit
together, under the user's wallet lock.
"""
import logging
from decimal import Decimal, ROUND_FLOOR

from ..errors import (
    AuthorizationError, InsufficientFundsError, NotFoundError, ValidationError
)
from ..models import BOOKING_STATUSES, PAYMENT_METHODS
from ..store import canonical_id
from ..validation import (
    as_choice, as_int, as_number, as_text, ensure_json_object, missing_fields, reject_unknown
)

logger = logging.getLogger(__name__)

DEFAULT_REWARD_RATE = 0.05
REQUIRED_FIELDS = ('customerName', 'email', 'destinationName', 'date', 'totalPrice')
OPTIONAL_FIELDS = ('userId', 'destinationId', 'phone', 'guests', 'pointsUsed', 'status', 'paymentMethod')
# Cancelled/Completed only ever come from an admin update
CREATION_STATUSES = ('Confirmed', 'Pending')
EDITABLE_FIELDS = ('status', 'date', 'guests', 'phone', 'customerName', 'email', 'paymentMethod')
READ_ONLY_FIELDS = ('id', 'userId', 'destinationId', 'destinationName', 'totalPrice',
                    'pointsUsed', 'pointsEarned', 'createdAt')


def reward_points(total_price, rate=DEFAULT_REWARD_RATE):
    """Points earned for a paid booking: ``floor(total_price * rate)``."""
    earned = Decimal(str(total_price)) * Decimal(str(rate))
    return int(earned.to_integral_value(rounding=ROUND_FLOOR))


class BookingService:

    def __init__(self, store, reward_rate=DEFAULT_REWARD_RATE):
        self.store = store
        self.reward_rate = reward_rate

    def list_bookings(self, user_id=None):
        """All bookings, or one user's, newest first."""
        if user_id is not None:
            return self.store.bookings.list(order_by='-createdAt', userId=canonical_id(user_id))
        return self.store.bookings.list(order_by='-createdAt')

    def get_booking(self, booking_id):
        booking = self.store.bookings.get(booking_id)
        if booking is None:
            raise NotFoundError('Booking not found')
        return booking

    def create_booking(self, data):
        """Validate, reconcile the wallet and persist a booking.

        Returns ``(booking, updated_balance)``; the balance is None for guest
        bookings.
        """
        booking = self._new_booking(data)
        user_id = booking['userId']

        if user_id is None:
            if booking['pointsUsed'] > 0:
                raise ValidationError('Wallet points can only be redeemed by a registered user.')
            with self.store.atomic():
                created = self.store.bookings.insert(booking)
            logger.info('Guest booking %s created for %s', created['id'], created['destinationName'])
            return created, None

        with self.store.wallet_lock(user_id), self.store.atomic():
            user = self.store.users.get(user_id, for_update=True)
            if user is None:
                raise NotFoundError('User not found')
            if user.get('status') == 'Banned':
                raise AuthorizationError('This account has been suspended.')

            balance = user['walletBalance']
            if booking['status'] == 'Confirmed':
                points_used = booking['pointsUsed']
                if points_used > balance:
                    logger.warning('Booking rejected for user %s: %s points requested, balance %s',
                                   user_id, points_used, balance)
                    raise InsufficientFundsError()
                booking['pointsEarned'] = reward_points(booking['totalPrice'], self.reward_rate)
                balance = balance - points_used + booking['pointsEarned']
                self.store.users.update(user_id, {'walletBalance': balance})

            created = self.store.bookings.insert(booking)

        logger.info('Booking %s (%s) created for user %s: used %s, earned %s, balance %s',
                    created['id'], created['status'], user_id,
                    created['pointsUsed'], created['pointsEarned'], balance)
        return created, balance

    def update_booking(self, booking_id, data):
        """Admin edit. Confirming a pending booking credits its reward points.

        Cancelling does not refund redeemed points or reclaim earned ones.
        """
        changes = self._booking_changes(data)
        booking = self.get_booking(booking_id)

        confirming = booking['status'] == 'Pending' and changes.get('status') == 'Confirmed'
        if not (confirming and booking['userId']):
            with self.store.atomic():
                updated = self.store.bookings.update(booking_id, changes)
            if updated is None:
                raise NotFoundError('Booking not found')
            logger.info('Booking %s updated: %s', booking_id, ', '.join(sorted(changes)))
            return updated

        user_id = booking['userId']
        with self.store.wallet_lock(user_id), self.store.atomic():
            # Re-read under the lock; a concurrent request may have confirmed it
            current = self.store.bookings.get(booking_id)
            if current is None:
                raise NotFoundError('Booking not found')
            if current['status'] == 'Pending':
                user = self.store.users.get(user_id, for_update=True)
                if user is not None:
                    earned = reward_points(current['totalPrice'], self.reward_rate)
                    self.store.users.update(user_id, {'walletBalance': user['walletBalance'] + earned})
                    changes['pointsEarned'] = earned
                else:
                    logger.warning('Booking %s confirmed for missing user %s; no reward credited',
                                   booking_id, user_id)
            updated = self.store.bookings.update(booking_id, changes)

        logger.info('Booking %s confirmed for user %s, earned %s',
                    booking_id, user_id, updated['pointsEarned'])
        return updated

    def delete_booking(self, booking_id):
        with self.store.atomic():
            deleted = self.store.bookings.delete(booking_id)
        if not deleted:
            raise NotFoundError('Booking not found')
        logger.info('Booking %s deleted', booking_id)

    def _new_booking(self, data):
        ensure_json_object(data)
        missing = missing_fields(data, REQUIRED_FIELDS)
        if missing:
            raise ValidationError(f"Missing required booking details: {', '.join(missing)}")
        reject_unknown(data, REQUIRED_FIELDS + OPTIONAL_FIELDS, ignored=('pointsEarned', 'id', 'createdAt'))

        status = as_choice(data.get('status') or 'Confirmed', 'status', CREATION_STATUSES)
        points_used = 0
        if data.get('pointsUsed') is not None:
            points_used = as_int(data['pointsUsed'], 'pointsUsed', minimum=0)
        if status == 'Pending':
            points_used = 0
        guests = 1
        if data.get('guests') is not None:
            guests = as_int(data['guests'], 'guests', minimum=1)

        return {
            'userId': canonical_id(data.get('userId')),
            'customerName': as_text(data['customerName'], 'customerName'),
            'email': as_text(data['email'], 'email'),
            'phone': as_text(data.get('phone'), 'phone', required=False),
            'destinationId': canonical_id(data.get('destinationId')),
            'destinationName': as_text(data['destinationName'], 'destinationName'),
            'date': as_text(data['date'], 'date'),
            'guests': guests,
            'totalPrice': as_number(data['totalPrice'], 'totalPrice', positive=True),
            'pointsUsed': points_used,
            'pointsEarned': 0,
            'status': status,
            'paymentMethod': as_choice(data.get('paymentMethod') or 'Credit Card',
                                       'paymentMethod', PAYMENT_METHODS),
        }

    def _booking_changes(self, data):
        ensure_json_object(data)
        reject_unknown(data, EDITABLE_FIELDS, ignored=READ_ONLY_FIELDS)
        changes = {}
        if 'status' in data:
            changes['status'] = as_choice(data['status'], 'status', BOOKING_STATUSES)
        if 'guests' in data:
            changes['guests'] = as_int(data['guests'], 'guests', minimum=1)
        if 'paymentMethod' in data:
            changes['paymentMethod'] = as_choice(data['paymentMethod'], 'paymentMethod', PAYMENT_METHODS)
        if 'phone' in data:
            changes['phone'] = as_text(data['phone'], 'phone', required=False)
        for field in ('date', 'customerName', 'email'):
            if field in data:
                changes[field] = as_text(data[field], field)
        if not changes:
            raise ValidationError('No updatable booking fields supplied.')
        return changes
