from conftest import booking_request, make_user


def test_bob_books_with_points(client, app_store, user_headers):
    make_user(app_store, user_id='1', balance=500)

    response = client.post('/api/bookings', json=booking_request(userId=1, pointsUsed=200),
                           headers=user_headers('1'))

    body = response.get_json()
    assert response.status_code == 201
    assert body['success'] is True
    assert body['message'] == 'Booking confirmed!'
    assert body['updatedBalance'] == 800
    assert body['booking']['pointsEarned'] == 500
    assert body['booking']['userId'] == '1'
    assert app_store.users.get('1')['walletBalance'] == 800


def test_insufficient_balance(client, app_store, user_headers):
    make_user(app_store, user_id='1', balance=100)

    response = client.post('/api/bookings', json=booking_request(userId='1', pointsUsed=200),
                           headers=user_headers('1'))

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Insufficient wallet balance.'}
    assert app_store.bookings.list() == []
    assert app_store.users.get('1')['walletBalance'] == 100


def test_pending_booking_message(client, app_store, user_headers):
    make_user(app_store, user_id='1', balance=100)

    response = client.post('/api/bookings', json=booking_request(userId='1', status='Pending'),
                           headers=user_headers('1'))

    assert response.status_code == 201
    assert response.get_json()['message'] == 'Booking reserved. Payment pending.'
    assert response.get_json()['updatedBalance'] == 100


def test_guest_booking_needs_no_token(client):
    response = client.post('/api/bookings', json=booking_request())

    assert response.status_code == 201
    assert response.get_json()['updatedBalance'] is None
    assert response.get_json()['booking']['userId'] is None


def test_missing_fields(client):
    response = client.post('/api/bookings', json={'customerName': 'Bob'})

    assert response.status_code == 400
    assert 'Missing required booking details' in response.get_json()['error']


def test_wallet_booking_must_belong_to_caller(client, app_store, user_headers, admin_headers):
    make_user(app_store, user_id='1', balance=500)
    make_user(app_store, user_id='2', balance=500)

    anonymous = client.post('/api/bookings', json=booking_request(userId='1', pointsUsed=100))
    other_user = client.post('/api/bookings', json=booking_request(userId='1', pointsUsed=100),
                             headers=user_headers('2'))
    admin = client.post('/api/bookings', json=booking_request(userId='1', pointsUsed=100),
                        headers=admin_headers)

    assert anonymous.status_code == 401
    assert other_user.status_code == 403
    assert admin.status_code == 201
    assert app_store.users.get('1')['walletBalance'] == 900
    assert app_store.users.get('2')['walletBalance'] == 500


def test_booking_for_unknown_user(client, admin_headers):
    response = client.post('/api/bookings', json=booking_request(userId='404'), headers=admin_headers)

    assert response.status_code == 404


def test_listing_bookings(client, app_store, user_headers, admin_headers):
    make_user(app_store, user_id='1', balance=0)
    make_user(app_store, user_id='2', balance=0)
    client.post('/api/bookings', json=booking_request(userId='1'), headers=user_headers('1'))
    client.post('/api/bookings', json=booking_request(userId='2'), headers=user_headers('2'))
    client.post('/api/bookings', json=booking_request())

    everything = client.get('/api/bookings', headers=admin_headers)
    mine = client.get('/api/bookings?userId=1', headers=user_headers('1'))

    assert len(everything.get_json()) == 3
    assert [b['userId'] for b in mine.get_json()] == ['1']
    assert client.get('/api/bookings', headers=user_headers('1')).status_code == 403
    assert client.get('/api/bookings?userId=2', headers=user_headers('1')).status_code == 403
    assert client.get('/api/bookings').status_code == 401


def test_get_single_booking(client, app_store, user_headers, admin_headers):
    make_user(app_store, user_id='1', balance=0)
    make_user(app_store, user_id='2', balance=0)
    own = client.post('/api/bookings', json=booking_request(userId='1'),
                      headers=user_headers('1')).get_json()['booking']
    guest = client.post('/api/bookings', json=booking_request()).get_json()['booking']

    assert client.get(f"/api/bookings/{own['id']}", headers=user_headers('1')).status_code == 200
    assert client.get(f"/api/bookings/{own['id']}", headers=user_headers('2')).status_code == 403
    assert client.get(f"/api/bookings/{guest['id']}", headers=user_headers('1')).status_code == 403
    assert client.get(f"/api/bookings/{guest['id']}", headers=admin_headers).status_code == 200
    assert client.get('/api/bookings/missing', headers=admin_headers).status_code == 404


def test_admin_confirms_and_cancels(client, app_store, user_headers, admin_headers):
    make_user(app_store, user_id='1', balance=100)
    booking = client.post('/api/bookings', json=booking_request(userId='1', status='Pending'),
                          headers=user_headers('1')).get_json()['booking']

    forbidden = client.put(f"/api/bookings/{booking['id']}", json={'status': 'Confirmed'},
                           headers=user_headers('1'))
    confirmed = client.put(f"/api/bookings/{booking['id']}", json={'status': 'Confirmed'},
                           headers=admin_headers)
    cancelled = client.put(f"/api/bookings/{booking['id']}", json={'status': 'Cancelled'},
                           headers=admin_headers)

    assert forbidden.status_code == 403
    assert confirmed.status_code == 200
    assert confirmed.get_json()['pointsEarned'] == 500
    assert cancelled.get_json()['status'] == 'Cancelled'
    assert app_store.users.get('1')['walletBalance'] == 600


def test_admin_deletes_booking(client, admin_headers):
    booking = client.post('/api/bookings', json=booking_request()).get_json()['booking']

    assert client.delete(f"/api/bookings/{booking['id']}").status_code == 401
    assert client.delete(f"/api/bookings/{booking['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/bookings/{booking['id']}", headers=admin_headers).status_code == 404


def test_oversized_number_is_a_client_error(client):
    response = client.post('/api/bookings', data='{"customerName": "Bob", "email": "b@x.com", '
                           '"destinationName": "Goa", "date": "2025-01-01", "totalPrice": ' + '9' * 400 + '}',
                           content_type='application/json')

    assert response.status_code == 400
    assert response.get_json()['error'] == 'totalPrice must be a number.'
