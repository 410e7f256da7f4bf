# tests/test_api_routes.py

import pytest
from unittest.mock import MagicMock

SCHEDULE = {
    'Fajr': '05:10', 'Sunrise': '06:30', 'Dhuhr': '12:30',
    'Asr': '15:45', 'Maghrib': '18:20', 'Isha': '19:40',
}


@pytest.fixture
def prayer_adapter(mocker):
    adapter = MagicMock()
    adapter.fetch_city_timings.return_value = SCHEDULE
    mocker.patch('masjid_site.services.prayer_time_service.get_selected_api_adapter', return_value=adapter)
    return adapter


def test_countdown_reports_next_prayer(test_client, prayer_adapter):
    response = test_client.get('/api/countdown')

    assert response.status_code == 200
    data = response.get_json()
    assert data['nextPrayer']['key'] == 'Asr'
    assert data['nextPrayer']['isTomorrow'] is False
    assert data['countdown'] == '02:45:00'
    assert data['broadcast'] is None


def test_countdown_follows_the_clock(test_client, prayer_adapter, clock):
    clock.advance(hours=8)
    data = test_client.get('/api/countdown').get_json()
    assert data['nextPrayer']['key'] == 'Fajr'
    assert data['nextPrayer']['isTomorrow'] is True
    assert data['countdown'] == '08:10:00'


def test_countdown_includes_broadcast(test_client, prayer_adapter, runtime):
    runtime.store.set_site_config({'broadcast_name': 'Tafsir Live', 'broadcast_date': '2025-03-10', 'broadcast_time': '14:00'})

    data = test_client.get('/api/countdown').get_json()

    assert data['broadcast']['name'] == 'Tafsir Live'
    assert data['broadcast']['countdown'] == '01:00:00'


def test_countdown_without_schedule(test_client, prayer_adapter):
    prayer_adapter.fetch_city_timings.return_value = None

    data = test_client.get('/api/countdown').get_json()

    assert data['nextPrayer'] is None
    assert data['countdown'] is None


def test_prayer_times_ok(test_client, prayer_adapter):
    data = test_client.get('/api/prayer-times').get_json()
    assert data['status'] == 'ok'
    assert data['timings'] == SCHEDULE
    assert data['city'] == 'Cape Town'


def test_prayer_times_unavailable_is_not_an_error(test_client, prayer_adapter):
    prayer_adapter.fetch_city_timings.return_value = None

    response = test_client.get('/api/prayer-times')

    assert response.status_code == 200
    assert response.get_json()['status'] == 'unavailable'


def test_broadcast_preview(test_client):
    data = test_client.get('/api/broadcast/preview?date=2025-03-10&time=13:30').get_json()
    assert data['scheduled'] is True
    assert data['countdown'] == '00:30:00'

    data = test_client.get('/api/broadcast/preview?date=2024-02-30&time=13:30').get_json()
    assert data['scheduled'] is False


def test_metrics_endpoint(test_client):
    response = test_client.get('/api/metrics')
    assert response.status_code == 200
    assert b'masjid_site_content_api_requests_total' in response.data


@pytest.mark.parametrize('path', ['/', '/prayer-times', '/about', '/programs', '/events', '/gallery', '/donations', '/contact'])
def test_public_pages_render(test_client, prayer_adapter, path):
    response = test_client.get(path)
    assert response.status_code == 200
    assert b'Masjid Al Taubah' in response.data


def test_pages_render_store_content(test_client, prayer_adapter, runtime):
    runtime.store.replace_collection('events', [
        {'id': 1, 'title': 'Weekly Halaqah', 'kind': 'recurring', 'when_text': 'Mondays after Isha'},
        {'id': 2, 'title': 'Eid Picnic', 'kind': 'oneoff', 'event_date': '2025-04-01', 'event_time': '10:00'},
    ])
    html = test_client.get('/events').get_data(as_text=True)
    assert 'Mondays after Isha' in html
    assert '10:00 AM' in html


def test_prayer_page_shows_unavailable(test_client, prayer_adapter):
    prayer_adapter.fetch_city_timings.return_value = None
    html = test_client.get('/prayer-times').get_data(as_text=True)
    assert 'unavailable' in html


def test_countdown_polls_do_not_refetch_a_failed_schedule(test_client, prayer_adapter, clock):
    prayer_adapter.fetch_city_timings.return_value = None

    assert test_client.get('/').status_code == 200
    for _ in range(10):
        clock.advance(seconds=1)
        assert test_client.get('/api/countdown').get_json()['nextPrayer'] is None

    assert prayer_adapter.fetch_city_timings.call_count == 1

    # The next page load tries upstream again.
    prayer_adapter.fetch_city_timings.return_value = SCHEDULE
    test_client.get('/')
    assert prayer_adapter.fetch_city_timings.call_count == 2
    assert test_client.get('/api/countdown').get_json()['nextPrayer'] is not None
