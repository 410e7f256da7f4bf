# tests/test_admin_routes.py

import pytest

from conftest import fake_response, ok

ADMIN = {'id': 7, 'email': 'admin@masjidaltaubah.co.za', 'full_name': 'Site Admin', 'role': 'super_admin'}
EDITOR = {'id': 8, 'email': 'editor@masjidaltaubah.co.za', 'full_name': 'Editor', 'role': 'admin'}


@pytest.fixture
def content_api(mocker):
    """Routes every content API call made through requests.Session."""
    state = {'rows': {'events': [{'id': 1, 'title': 'Halaqah', 'kind': 'recurring'}], 'users': [dict(ADMIN)]}}

    def respond(method, url, json=None, timeout=None):
        resource = url.split('/api/', 1)[1]
        if resource == 'auth/login':
            if json['password'] == 'correct horse':
                return ok(token='tok-xyz', user=dict(ADMIN))
            if json['password'] == 'plain admin':
                return ok(token='tok-abc', user=dict(EDITOR))
            return fake_response(401, {'ok': False, 'error': 'Invalid email or password'})
        if resource == 'content/site':
            return ok({'id': 1, 'brand_name': 'Masjid Al Taubah'})
        if method == 'GET':
            return ok(state['rows'].get(resource, []))
        if method == 'PUT':
            return ok({**json, 'id': int(resource.rsplit('/', 1)[1])})
        return ok()

    request = mocker.patch('masjid_site.services.content_api.requests.Session.request', side_effect=respond)
    return request


@pytest.fixture
def logged_in(test_client, content_api):
    response = test_client.post('/admin/login', data={'email': 'admin@masjidaltaubah.co.za', 'password': 'correct horse'})
    assert response.status_code == 302
    content_api.reset_mock()
    return test_client


def test_dashboard_requires_login(test_client):
    response = test_client.get('/admin/')
    assert response.status_code == 302
    assert '/admin/login' in response.headers['Location']


def test_login_failure_shows_server_message(test_client, content_api):
    response = test_client.post('/admin/login', data={'email': 'admin@masjidaltaubah.co.za', 'password': 'wrong'})
    assert response.status_code == 200
    assert b'Invalid email or password' in response.data


def test_login_loads_content_and_shows_notice(logged_in, runtime):
    html = logged_in.get('/admin/').get_data(as_text=True)
    assert 'Logged in.' in html
    assert 'Site Admin' in html
    assert runtime.store.find('users', 7) is not None


def test_self_delete_makes_no_request(logged_in, content_api, runtime):
    response = logged_in.post('/admin/users/7/delete')

    assert response.status_code == 302
    content_api.assert_not_called()
    assert runtime.store.find('users', 7) is not None
    assert 'You cannot delete your own account.' in logged_in.get('/admin/?tab=users').get_data(as_text=True)


def test_edit_row_updates_store(logged_in, content_api, runtime):
    response = logged_in.post('/admin/events/1/edit', data={'title': 'Tafsir Circle', 'kind': 'recurring', 'when_text': 'Fridays'})

    assert response.status_code == 302
    assert runtime.store.find('events', 1)['title'] == 'Tafsir Circle'
    assert content_api.call_count == 1


def test_invalid_form_posts_notice(logged_in, content_api):
    logged_in.post('/admin/events/new', data={'title': ''})
    content_api.assert_not_called()
    assert 'Invalid input: title' in logged_in.get('/admin/?tab=events').get_data(as_text=True)


def test_unknown_kind_is_404(logged_in):
    assert logged_in.post('/admin/donors/new').status_code == 404


def test_logout_closes_session(logged_in, runtime):
    response = logged_in.get('/admin/logout')
    assert response.status_code == 302
    assert logged_in.get('/admin/').status_code == 302


def test_refresh_users_refetches_list(logged_in, content_api, runtime):
    logged_in.post('/admin/users/refresh')
    content_api.assert_called_once()
    assert content_api.call_args.args[0] == 'GET'
    assert content_api.call_args.args[1].endswith('/api/users')
    assert runtime.store.find('users', 7)['full_name'] == 'Site Admin'


def test_plain_admin_cannot_open_user_pages(test_client, content_api, runtime):
    runtime.store.replace_collection('users', [dict(ADMIN)])
    test_client.post('/admin/login', data={'email': 'editor@masjidaltaubah.co.za', 'password': 'plain admin'})
    content_api.reset_mock()

    assert test_client.get('/admin/users/7/edit').status_code == 404
    assert test_client.post('/admin/users/7/delete').status_code == 404
    assert test_client.get('/admin/events/1/edit').status_code == 200
    content_api.assert_not_called()


def test_idle_admin_session_expires(logged_in, runtime, clock):
    with logged_in.session_transaction() as sess:
        key = sess['admin_key']
    with logged_in.application.app_context():
        controller = runtime.controller_for(key)
    assert controller is not None

    clock.advance(hours=9)

    assert logged_in.get('/admin/').status_code == 302
    assert not controller.alive
    assert len(runtime.admin_sessions) == 0
