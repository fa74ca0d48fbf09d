from datetime import timedelta
import jwt
from community_booking.models import Booking
from community_booking.utils.clock import local_now


def future_day(days=3):
    return (local_now() + timedelta(days=days)).date()


def booking_payload(day, hour=10, **overrides):
    payload = {
        'resource_id': 'meeting-room-2',
        'start_time': f"{day.isoformat()}T{hour:02d}:00:00",
        'duration_hours': 2,
        'purpose': 'Book club',
        'attendees': 6,
    }
    payload.update(overrides)
    return payload


def test_health(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'ok'


def test_list_resources(client):
    res = client.get('/api/resources/')
    assert res.status_code == 200
    assert [r['id'] for r in res.get_json()][:2] == ['community-hall', 'meeting-room-1']


def test_get_unknown_resource(client):
    res = client.get('/api/resources/rooftop')
    assert res.status_code == 404
    assert res.get_json()['error'] == 'not_found'


def test_availability(client, auth_headers):
    day = future_day()
    client.post('/api/bookings/', json=booking_payload(day, hour=10), headers=auth_headers())

    res = client.get(f'/api/resources/meeting-room-2/availability?date={day.isoformat()}&duration=2')
    assert res.status_code == 200
    starts = [s['start_hour'] for s in res.get_json()['slots']]
    assert starts == [8, 12, 13, 14, 15, 16, 17, 18]


def test_availability_defaults_to_two_hours(client):
    res = client.get(f'/api/resources/meeting-room-2/availability?date={future_day().isoformat()}')
    assert res.get_json()['duration_hours'] == 2


def test_availability_rejects_bad_input(client):
    assert client.get('/api/resources/meeting-room-2/availability').status_code == 400
    res = client.get('/api/resources/meeting-room-2/availability?date=tomorrow')
    assert res.status_code == 400
    res = client.get(f'/api/resources/meeting-room-2/availability?date={future_day()}&duration=0')
    assert res.status_code == 400
    assert res.get_json()['error'] == 'invalid_argument'


def test_create_booking_requires_token(client):
    res = client.post('/api/bookings/', json=booking_payload(future_day()))
    assert res.status_code == 401


def test_create_booking_rejects_bad_token(app, client):
    token = jwt.encode({'user_id': 'alice'}, 'some-other-signing-key-that-does-not-match', algorithm="HS256")
    res = client.post('/api/bookings/', json=booking_payload(future_day()),
                      headers={'Authorization': f'Bearer {token}'})
    assert res.status_code == 401


def test_create_list_and_cancel(client, auth_headers):
    day = future_day()
    res = client.post('/api/bookings/', json=booking_payload(day), headers=auth_headers())
    assert res.status_code == 201
    created = res.get_json()
    assert created['user_id'] == 'alice'
    assert created['resource_name'] == 'Meeting Room 2'
    assert created['end_time'] == f"{day.isoformat()}T12:00:00"

    res = client.get('/api/bookings/my_bookings', headers=auth_headers())
    assert [b['id'] for b in res.get_json()] == [created['id']]
    res = client.get('/api/bookings/my_bookings', headers=auth_headers("bob"))
    assert res.get_json() == []

    res = client.delete(f"/api/bookings/{created['id']}", headers=auth_headers("bob"))
    assert res.status_code == 403
    res = client.delete(f"/api/bookings/{created['id']}", headers=auth_headers())
    assert res.status_code == 200
    res = client.delete(f"/api/bookings/{created['id']}", headers=auth_headers())
    assert res.status_code == 404


def test_explicit_end_time(client, auth_headers):
    day = future_day()
    payload = booking_payload(day, end_time=f"{day.isoformat()}T11:00:00")
    res = client.post('/api/bookings/', json=payload, headers=auth_headers())
    assert res.status_code == 201
    assert res.get_json()['end_time'] == f"{day.isoformat()}T11:00:00"


def test_offset_timestamps_are_converted_to_local_time(client, auth_headers):
    day = future_day()
    payload = booking_payload(day, start_time=f"{day.isoformat()}T12:00:00+02:00")
    res = client.post('/api/bookings/', json=payload, headers=auth_headers())
    assert res.status_code == 201
    # Testing timezone is UTC
    assert res.get_json()['start_time'] == f"{day.isoformat()}T10:00:00"


def test_conflict_is_409(client, auth_headers):
    day = future_day()
    client.post('/api/bookings/', json=booking_payload(day, hour=9), headers=auth_headers())
    res = client.post('/api/bookings/', json=booking_payload(day, hour=10), headers=auth_headers("bob"))
    assert res.status_code == 409
    assert res.get_json()['error'] == 'slot_conflict'


def test_capacity_and_window_errors(client, auth_headers):
    day = future_day()
    res = client.post('/api/bookings/', json=booking_payload(day, attendees=40), headers=auth_headers())
    assert res.status_code == 400
    assert res.get_json()['error'] == 'capacity_exceeded'

    yesterday = (local_now() - timedelta(days=1)).date()
    res = client.post('/api/bookings/', json=booking_payload(yesterday), headers=auth_headers())
    assert res.status_code == 400
    assert res.get_json()['error'] == 'invalid_window'

    res = client.post('/api/bookings/', json=booking_payload(day, start_time='soon'), headers=auth_headers())
    assert res.status_code == 400
    assert res.get_json()['error'] == 'invalid_argument'

    assert Booking.query.count() == 0


def test_missing_body(client, auth_headers):
    res = client.post('/api/bookings/', data='nope', headers=auth_headers())
    assert res.status_code == 400


def test_non_string_resource_id_is_invalid_argument(client, auth_headers):
    day = future_day()
    for resource_id in (["meeting-room-2"], {"id": "meeting-room-2"}, 42):
        res = client.post('/api/bookings/', json=booking_payload(day, resource_id=resource_id),
                          headers=auth_headers())
        assert res.status_code == 400
        assert res.get_json()['error'] == 'invalid_argument'


def test_out_of_range_duration_is_invalid_argument(client, auth_headers):
    day = future_day()
    res = client.post('/api/bookings/', json=booking_payload(day, duration_hours=10 ** 9),
                      headers=auth_headers())
    assert res.status_code == 400
    assert res.get_json()['error'] == 'invalid_argument'
    assert Booking.query.count() == 0
