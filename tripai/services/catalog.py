import copy
import logging
import re

from ..errors import NotFoundError, ValidationError
from ..models import DESTINATION_TYPES
from ..validation import (
    as_bool, as_choice, as_int, as_number, as_string_list, as_text,
    ensure_json_object, missing_fields, reject_unknown
)

logger = logging.getLogger(__name__)

DEFAULT_TYPE = 'Adventure'
DEFAULT_IMAGE = 'https://images.unsplash.com/photo-1476514525535-07fb3b4ae5f1?w=800&q=80'
DEFAULT_DESCRIPTION = 'Experience an unforgettable journey with our curated travel package.'
DEFAULT_RATING = 5.0
DEFAULT_AMENITIES = ['WiFi', 'Breakfast', 'Pool', 'Guide']
DEFAULT_INCLUSIONS = ['Accommodation', 'Daily Breakfast', 'Airport Transfers', 'English Speaking Guide']
DEFAULT_EXCLUSIONS = ['International Flights', 'Personal Expenses', 'Travel Insurance']
DEFAULT_ITINERARY = [
    {
        'day': 1,
        'title': 'Arrival & Welcome',
        'activities': ['Airport Pickup', 'Hotel Check-in', 'Welcome Drink', 'Relaxation'],
        'meals': ['Dinner']
    },
    {
        'day': 2,
        'title': 'City Exploration',
        'activities': ['Guided City Tour', 'Local Cuisine Lunch', 'Visit Famous Landmarks'],
        'meals': ['Breakfast', 'Lunch']
    },
    {
        'day': 3,
        'title': 'Departure',
        'activities': ['Breakfast Buffet', 'Souvenir Shopping', 'Airport Transfer'],
        'meals': ['Breakfast']
    }
]

REQUIRED_FIELDS = ('name', 'price', 'country')
EDITABLE_FIELDS = ('name', 'country', 'description', 'price', 'type', 'rating', 'reviewsCount',
                   'image', 'gallery', 'amenities', 'inclusions', 'exclusions', 'itinerary',
                   'isFeatured')
# Sent back by clients that echo a whole destination; never written
READ_ONLY_FIELDS = ('id', 'priceDisplay', 'createdAt')


def format_price(price):
    """Rupee display string with Indian digit grouping: 1850000 -> '₹18,50,000'."""
    whole, _, fraction = f'{price:.2f}'.partition('.')
    head, tail = whole[:-3], whole[-3:]
    if head:
        head = re.sub(r'(\d)(?=(\d{2})+$)', r'\1,', head)
        whole = f'{head},{tail}'
    if fraction == '00':
        return f'₹{whole}'
    return f'₹{whole}.{fraction}'


def validate_itinerary(value):
    if not isinstance(value, list):
        raise ValidationError('itinerary must be a list of days.')
    days = []
    for item in value:
        if not isinstance(item, dict):
            raise ValidationError('Each itinerary entry must be an object.')
        day = {
            'day': as_int(item.get('day'), 'itinerary.day', minimum=1),
            'title': as_text(item.get('title'), 'itinerary.title'),
            'activities': as_string_list(item.get('activities', []), 'itinerary.activities'),
        }
        if item.get('meals') is not None:
            day['meals'] = as_string_list(item['meals'], 'itinerary.meals')
        days.append(day)
    return days


class CatalogService:

    def __init__(self, store):
        self.store = store

    def list_destinations(self, destination_type=None, featured=None):
        filters = {}
        if destination_type:
            filters['type'] = as_choice(destination_type, 'type', DESTINATION_TYPES)
        if featured is not None:
            filters['isFeatured'] = featured
        return self.store.destinations.list(order_by='createdAt', **filters)

    def get_destination(self, destination_id):
        destination = self.store.destinations.get(destination_id)
        if destination is None:
            raise NotFoundError('Destination not found')
        return destination

    def create_destination(self, data):
        """Create a listing; anything the admin left out gets a renderable default."""
        ensure_json_object(data)
        if missing_fields(data, REQUIRED_FIELDS):
            raise ValidationError('Name, Price, and Country are required fields.')
        reject_unknown(data, EDITABLE_FIELDS, ignored=READ_ONLY_FIELDS)

        destination = {
            'type': DEFAULT_TYPE,
            'description': DEFAULT_DESCRIPTION,
            'image': DEFAULT_IMAGE,
            'rating': DEFAULT_RATING,
            'reviewsCount': 0,
            'isFeatured': False,
            'gallery': [],
            'amenities': list(DEFAULT_AMENITIES),
            'inclusions': list(DEFAULT_INCLUSIONS),
            'exclusions': list(DEFAULT_EXCLUSIONS),
            'itinerary': copy.deepcopy(DEFAULT_ITINERARY),
        }
        destination.update(self._clean(data))
        destination['priceDisplay'] = format_price(destination['price'])

        with self.store.atomic():
            created = self.store.destinations.insert(destination)
        logger.info('Destination %s created: %s', created['id'], created['name'])
        return created

    def update_destination(self, destination_id, data):
        ensure_json_object(data)
        reject_unknown(data, EDITABLE_FIELDS, ignored=READ_ONLY_FIELDS)
        changes = self._clean(data)
        if 'price' in changes:
            changes['priceDisplay'] = format_price(changes['price'])

        with self.store.atomic():
            updated = self.store.destinations.update(destination_id, changes)
        if updated is None:
            raise NotFoundError('Destination not found')
        logger.info('Destination %s updated: %s', destination_id, ', '.join(sorted(changes)) or 'no changes')
        return updated

    def delete_destination(self, destination_id):
        with self.store.atomic():
            deleted = self.store.destinations.delete(destination_id)
        if not deleted:
            raise NotFoundError('Destination not found')
        logger.info('Destination %s deleted', destination_id)

    def _clean(self, data):
        """Validate the supplied editable fields, leaving absent ones out."""
        clean = {}
        for field in ('name', 'country', 'image'):
            if field in data:
                clean[field] = as_text(data[field], field)
        if 'description' in data:
            clean['description'] = as_text(data['description'], 'description', required=False) or ''
        if 'price' in data:
            clean['price'] = as_number(data['price'], 'price', positive=True)
        if 'type' in data:
            clean['type'] = as_choice(data['type'], 'type', DESTINATION_TYPES)
        if 'rating' in data:
            clean['rating'] = as_number(data['rating'], 'rating', minimum=0)
            if clean['rating'] > 5:
                raise ValidationError('rating must be between 0 and 5.')
        if 'reviewsCount' in data:
            clean['reviewsCount'] = as_int(data['reviewsCount'], 'reviewsCount', minimum=0)
        for field in ('gallery', 'amenities', 'inclusions', 'exclusions'):
            if field in data:
                clean[field] = as_string_list(data[field], field)
        if 'itinerary' in data:
            clean['itinerary'] = validate_itinerary(data['itinerary'])
        if 'isFeatured' in data:
            clean['isFeatured'] = as_bool(data['isFeatured'], 'isFeatured')
        return clean
