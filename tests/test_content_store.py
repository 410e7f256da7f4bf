# tests/test_content_store.py

import json
from unittest.mock import MagicMock

import pytest

from masjid_site.models import Loading, Ready
from masjid_site.services.content_api import ContentApiError
from masjid_site.services.content_store import ContentStore
from masjid_site.utils.constants import DEFAULT_SITE
from conftest import cached_site


@pytest.fixture
def store():
    return ContentStore(cache_key='site_config_cache')


def _client(site=None, collections=None):
    client = MagicMock()
    client.get_site.return_value = site
    client.list.side_effect = lambda kind: list((collections or {}).get(kind, []))
    return client


def test_starts_loading_with_defaults(store):
    assert isinstance(store.site_state, Loading)
    assert store.site_config == DEFAULT_SITE
    assert store.collection('events') == []


def test_hydrate_from_cache_hit(store, fake_redis, app_ctx):
    fake_redis.set('site_config_cache', json.dumps({'brand_name': 'Cached Masjid'}))

    assert store.hydrate_from_cache() is True
    assert store.site_ready
    assert store.site_config['brand_name'] == 'Cached Masjid'
    assert store.site_config['donations_title'] == DEFAULT_SITE['donations_title']


def test_hydrate_from_cache_miss_and_garbage(store, fake_redis, app_ctx):
    assert store.hydrate_from_cache() is False
    fake_redis.set('site_config_cache', '{not json')
    assert store.hydrate_from_cache() is False
    assert isinstance(store.site_state, Loading)


def test_reload_all_replaces_everything_and_writes_cache(store, fake_redis, app_ctx):
    site = {'id': 1, 'brand_name': 'Fresh'}
    client = _client(site, {
        'events': [{'id': 1, 'title': 'Eid'}],
        'footer-links': [{'id': 1, 'label': 'B', 'sort_order': 2}, {'id': 2, 'label': 'A', 'sort_order': '1'}],
        'users': [{'id': 9}],
    })

    store.reload_all(client)

    assert store.site_state == Ready(site)
    assert store.collection('events') == [{'id': 1, 'title': 'Eid'}]
    assert [r['label'] for r in store.collection('footer-links')] == ['A', 'B']
    assert store.collection('users') == []
    assert cached_site(fake_redis) == site


def test_reload_all_fetches_users_for_super_admin(store, app_ctx):
    client = _client({'id': 1}, {'users': [{'id': 9}]})
    store.reload_all(client, include_users=True)
    assert store.collection('users') == [{'id': 9}]


def test_reload_all_failure_applies_nothing(store, fake_redis, app_ctx):
    store.replace_collection('events', [{'id': 1}])
    client = _client({'id': 1, 'brand_name': 'Fresh'})
    client.list.side_effect = ContentApiError('Request failed')

    with pytest.raises(ContentApiError):
        store.reload_all(client)

    assert store.collection('events') == [{'id': 1}]
    assert isinstance(store.site_state, Loading)
    assert cached_site(fake_redis) is None


def test_partial_site_save_never_writes_cache(store, fake_redis, app_ctx):
    store.set_site_config({'id': 1, 'brand_name': 'Edited'})
    assert store.site_config['brand_name'] == 'Edited'
    assert cached_site(fake_redis) is None


def test_splice_keeps_order_and_other_rows(store):
    store.replace_collection('events', [{'id': 1, 'title': 'a'}, {'id': 2, 'title': 'b'}, {'id': 3, 'title': 'c'}])

    assert store.splice_row('events', {'id': '2', 'title': 'B'}) is True

    assert [r['title'] for r in store.collection('events')] == ['a', 'B', 'c']


def test_splice_missing_row(store):
    store.replace_collection('events', [{'id': 1}])
    assert store.splice_row('events', {'id': 5}) is False
    assert store.collection('events') == [{'id': 1}]


def test_append_dedupes_by_id(store):
    store.replace_collection('gallery', [{'id': 1, 'title': 'old'}])
    store.append_row('gallery', {'id': 1, 'title': 'new'})
    store.append_row('gallery', {'id': 2, 'title': 'two'})
    assert store.collection('gallery') == [{'id': 1, 'title': 'new'}, {'id': 2, 'title': 'two'}]


def test_remove_row_compares_ids_as_strings(store):
    store.replace_collection('contacts', [{'id': 1}, {'id': 2}])
    store.remove_row('contacts', '1')
    assert store.collection('contacts') == [{'id': 2}]


def test_collection_returns_a_copy(store):
    store.replace_collection('programs', [{'id': 1}])
    store.collection('programs').append({'id': 2})
    assert store.find('programs', 1) == {'id': 1}
    assert store.find('programs', 2) is None
