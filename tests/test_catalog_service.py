import pytest

from tripai.errors import NotFoundError, ValidationError
from tripai.services import CatalogService
from tripai.services.catalog import DEFAULT_AMENITIES, DEFAULT_ITINERARY, format_price


@pytest.mark.parametrize('price, expected', [
    (999, '₹999'),
    (18500, '₹18,500'),
    (1850000, '₹18,50,000'),
    (12345678, '₹1,23,45,678'),
    (1234.5, '₹1,234.50'),
])
def test_format_price_uses_indian_grouping(price, expected):
    assert format_price(price) == expected


def test_create_fills_defaults(store):
    destination = CatalogService(store).create_destination(
        {'name': 'Goa Beach Paradise', 'price': 18500, 'country': 'India'})

    assert destination['id']
    assert destination['priceDisplay'] == '₹18,500'
    assert destination['type'] == 'Adventure'
    assert destination['rating'] == 5.0
    assert destination['reviewsCount'] == 0
    assert destination['isFeatured'] is False
    assert destination['image'].startswith('https://')
    assert destination['description']
    assert destination['amenities'] == DEFAULT_AMENITIES
    assert destination['itinerary'] == DEFAULT_ITINERARY
    assert len(destination['itinerary']) == 3
    assert destination['inclusions'] and destination['exclusions']


def test_round_trip_keeps_supplied_fields(store):
    supplied = {
        'name': 'Manali Snow Peaks',
        'price': 12999,
        'country': 'India',
        'type': 'Mountain',
        'description': 'Snow-capped mountains and cozy cafes.',
        'amenities': ['Heater', 'Bonfire'],
        'itinerary': [
            {'day': 1, 'title': 'Arrival', 'activities': ['Check-in']},
            {'day': 2, 'title': 'Solang Valley', 'activities': ['Skiing'], 'meals': ['Dinner']},
        ],
        'isFeatured': True,
        'rating': 4.6,
    }
    service = CatalogService(store)
    created = service.create_destination(supplied)

    fetched = service.get_destination(created['id'])

    for field, value in supplied.items():
        assert fetched[field] == value
    assert fetched['inclusions']
    assert fetched['priceDisplay'] == '₹12,999'


@pytest.mark.parametrize('data', [
    {'price': 100, 'country': 'India'},
    {'name': 'X', 'country': 'India'},
    {'name': 'X', 'price': 100},
    {'name': '', 'price': 100, 'country': 'India'},
])
def test_create_requires_name_price_country(store, data):
    with pytest.raises(ValidationError):
        CatalogService(store).create_destination(data)


@pytest.mark.parametrize('overrides', [
    {'price': -1},
    {'price': 'free'},
    {'price': 10 ** 400},
    {'type': 'Space'},
    {'rating': 7},
    {'amenities': 'WiFi'},
    {'itinerary': [{'title': 'No day number', 'activities': []}]},
    {'isFeatured': 'yes'},
    {'hotelStars': 4},
])
def test_create_validates_optional_fields(store, overrides):
    data = dict({'name': 'X', 'price': 100, 'country': 'India'}, **overrides)

    with pytest.raises(ValidationError):
        CatalogService(store).create_destination(data)


def test_partial_update_recomputes_price_display(store):
    service = CatalogService(store)
    created = service.create_destination({'name': 'Royal Jaipur', 'price': 9500, 'country': 'India'})

    updated = service.update_destination(created['id'], {'price': 11000, 'isFeatured': True})

    assert updated['price'] == 11000
    assert updated['priceDisplay'] == '₹11,000'
    assert updated['isFeatured'] is True
    assert updated['name'] == 'Royal Jaipur'
    assert updated['itinerary'] == created['itinerary']


def test_update_accepts_echoed_read_only_fields(store):
    service = CatalogService(store)
    created = service.create_destination({'name': 'Royal Jaipur', 'price': 9500, 'country': 'India'})

    updated = service.update_destination(created['id'], dict(created, id='other', name='Pink City'))

    assert updated['id'] == created['id']
    assert updated['name'] == 'Pink City'


def test_update_and_get_unknown_destination(store):
    service = CatalogService(store)

    with pytest.raises(NotFoundError):
        service.update_destination('missing', {'name': 'Nowhere'})
    with pytest.raises(NotFoundError):
        service.get_destination('missing')


def test_delete_is_not_repeatable(store):
    service = CatalogService(store)
    created = service.create_destination({'name': 'Bali', 'price': 45000, 'country': 'Indonesia'})

    service.delete_destination(created['id'])

    with pytest.raises(NotFoundError):
        service.delete_destination(created['id'])


def test_list_filters_by_type_and_featured(store):
    service = CatalogService(store)
    service.create_destination({'name': 'Goa', 'price': 1, 'country': 'India', 'type': 'Beach', 'isFeatured': True})
    service.create_destination({'name': 'Paris', 'price': 1, 'country': 'France', 'type': 'City'})
    service.create_destination({'name': 'Dubai', 'price': 1, 'country': 'UAE'})

    assert len(service.list_destinations()) == 3
    assert [d['name'] for d in service.list_destinations(destination_type='Beach')] == ['Goa']
    assert [d['name'] for d in service.list_destinations(featured=True)] == ['Goa']
    assert len(service.list_destinations(featured=False)) == 2
    with pytest.raises(ValidationError):
        service.list_destinations(destination_type='Space')
