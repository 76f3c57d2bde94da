from uuid import uuid4

import pytest

from persona_chat.api.errors import TECHNICAL_ERROR_MESSAGE
from persona_chat.domain.errors import GatewayConnectionError

API = '/api/v1'


def _create_user(client, email='grace@example.com'):
    r = client.post(f'{API}/user', json={'firstName': 'Grace', 'lastName': 'Hopper', 'email': email})
    assert r.status_code == 201, r.text
    return r.json()


def _create_persona(client, display_name='Ada'):
    r = client.post(
        f'{API}/persona',
        json={'displayName': display_name, 'firstName': 'Ada', 'lastName': 'Lovelace'},
    )
    assert r.status_code == 201, r.text
    return r.json()


def _create_chat(client):
    user = _create_user(client)
    persona = _create_persona(client)
    r = client.post(f'{API}/chat', json={'personaId': persona['id'], 'userId': user['id'], 'title': 'Hello'})
    assert r.status_code == 201, r.text
    return r.json()


def test_healthcheck(client):
    r = client.get('/')
    assert r.status_code == 200
    assert r.json()['status'] == 'ok'


def test_send_message_returns_assistant_reply(client, gateway):
    chat = _create_chat(client)

    r = client.post(f'{API}/message/send', json={'chatId': chat['id'], 'content': 'Hi Ada'})

    assert r.status_code == 200, r.text
    body = r.json()
    assert body['role'] == 'assistant'
    assert body['content'] == 'Hello from the persona'
    assert body['chatId'] == chat['id']
    assert body['createdAt']
    assert gateway.calls[0]['history'][-1].content == 'Hi Ada'


def test_send_message_to_missing_chat_is_400(client):
    r = client.post(f'{API}/message/send', json={'chatId': str(uuid4()), 'content': 'Hi'})

    assert r.status_code == 400
    assert r.json()['message'] == 'Message validation failed'
    assert r.headers['Exception-Type'] == 'MessageValidationError'


def test_send_message_gateway_failure_is_generic_500(client, gateway):
    chat = _create_chat(client)
    gateway.error = GatewayConnectionError('OpenAI API request timed out: read timeout')

    r = client.post(f'{API}/message/send', json={'chatId': chat['id'], 'content': 'Hi'})

    assert r.status_code == 500
    assert r.json()['message'] == TECHNICAL_ERROR_MESSAGE
    assert 'timed out' not in r.text

    # the user's message survived
    page = client.get(f'{API}/message', params={'chatId': chat['id']}).json()
    assert [(m['role'], m['content']) for m in page['items']] == [('user', 'Hi')]


def test_send_message_too_long_is_400(client):
    chat = _create_chat(client)
    r = client.post(f'{API}/message/send', json={'chatId': chat['id'], 'content': 'x' * 10_001})
    assert r.status_code == 400


def test_message_crud_and_paging(client):
    chat = _create_chat(client)
    for i in range(15):
        r = client.post(f'{API}/message', json={'chatId': chat['id'], 'role': 'user', 'content': f'm{i}'})
        assert r.status_code == 201

    page = client.get(f'{API}/message', params={'chatId': chat['id'], 'pageNumber': 2, 'pageSize': 10}).json()
    assert [m['content'] for m in page['items']] == [f'm{i}' for i in range(10, 15)]
    assert page['totalCount'] == 15
    assert page['totalPages'] == 2
    assert page['hasPreviousPage'] is True
    assert page['hasNextPage'] is False

    message_id = page['items'][0]['id']
    assert client.get(f'{API}/message/{message_id}').json()['content'] == 'm10'
    assert client.delete(f'{API}/message/{message_id}').status_code == 204
    r = client.get(f'{API}/message/{message_id}')
    assert r.status_code == 404
    assert r.json()['isBusinessException'] is True


@pytest.mark.parametrize('page_size', [0, 101])
def test_page_size_bounds(client, page_size):
    r = client.get(f'{API}/message', params={'pageSize': page_size})
    assert r.status_code == 422


def test_chat_crud(client):
    chat = _create_chat(client)

    r = client.put(
        f'{API}/chat/{chat["id"]}',
        json={'personaId': chat['personaId'], 'userId': chat['userId'], 'title': 'Renamed'},
    )
    assert r.status_code == 200, r.text
    assert r.json()['title'] == 'Renamed'
    assert r.json()['lastMessageAt'] == chat['lastMessageAt']

    page = client.get(f'{API}/chat', params={'userId': chat['userId']}).json()
    assert [c['id'] for c in page['items']] == [chat['id']]

    assert client.delete(f'{API}/chat/{chat["id"]}').status_code == 204
    r = client.get(f'{API}/chat/{chat["id"]}')
    assert r.status_code == 404
    assert r.json()['message'] == 'Chat not found'


def test_chat_with_naive_last_message_at_then_send(client):
    persona = _create_persona(client)
    user = _create_user(client)
    r = client.post(
        f'{API}/chat',
        json={'personaId': persona['id'], 'userId': user['id'], 'lastMessageAt': '2025-01-01T00:00:00'},
    )
    assert r.status_code == 201, r.text
    chat = r.json()

    r = client.post(f'{API}/message/send', json={'chatId': chat['id'], 'content': 'Hi'})
    assert r.status_code == 200, r.text

    touched = client.get(f'{API}/chat/{chat["id"]}').json()
    assert not touched['lastMessageAt'].startswith('2025-01-01')


def test_update_chat_with_naive_last_message_at(client):
    chat = _create_chat(client)
    ids = {'personaId': chat['personaId'], 'userId': chat['userId']}

    r = client.put(f'{API}/chat/{chat["id"]}', json={**ids, 'lastMessageAt': '2030-01-01T00:00:00'})
    assert r.status_code == 200, r.text
    assert r.json()['lastMessageAt'].startswith('2030-01-01T00:00:00')

    r = client.put(f'{API}/chat/{chat["id"]}', json={**ids, 'lastMessageAt': '2020-01-01T00:00:00'})
    assert r.status_code == 200, r.text
    assert r.json()['lastMessageAt'].startswith('2030-01-01T00:00:00')


def test_persona_duplicate_display_name_is_400(client):
    _create_persona(client)
    r = client.post(f'{API}/persona', json={'displayName': 'ADA'})
    assert r.status_code == 400
    assert r.json()['message'] == 'Persona DisplayName already exists'


def test_persona_training(client):
    persona = _create_persona(client)

    r = client.put(f'{API}/persona/{persona["id"]}/training', json={'content': 'Mathematician.'})
    assert r.status_code == 200, r.text
    assert r.json()['trainingFilePath'].startswith('file:///')

    r = client.get(f'{API}/persona/{persona["id"]}/training')
    assert r.json() == {'personaId': persona['id'], 'content': 'Mathematician.'}

    r = client.put(f'{API}/persona/{persona["id"]}/training', json={'content': 'x' * 5001})
    assert r.status_code == 400
    assert r.json()['message'] == 'Training storage operation failed'


def test_persona_search_sort(client):
    _create_persona(client, 'Bravo')
    _create_persona(client, 'alpha')

    page = client.get(f'{API}/persona', params={'sortBy': 'alphabetical'}).json()
    assert [p['displayName'] for p in page['items']] == ['alpha', 'Bravo']


def test_persona_update_and_delete(client):
    persona = _create_persona(client)
    r = client.put(f'{API}/persona/{persona["id"]}', json={'displayName': 'Countess'})
    assert r.status_code == 200
    assert r.json()['displayName'] == 'Countess'

    assert client.delete(f'{API}/persona/{persona["id"]}').status_code == 204
    assert client.get(f'{API}/persona/{persona["id"]}').status_code == 404


def test_user_crud(client):
    user = _create_user(client)

    r = client.post(f'{API}/user', json={'email': 'GRACE@example.com'})
    assert r.status_code == 400
    assert r.json()['message'] == 'User Email already exists'

    r = client.put(f'{API}/user/{user["id"]}', json={'lastName': 'Hopper', 'email': 'grace@example.com', 'phone': '+15551234567'})
    assert r.status_code == 200
    assert r.json()['phone'] == '+15551234567'

    page = client.get(f'{API}/user', params={'lastName': 'hop'}).json()
    assert page['totalCount'] == 1

    assert client.delete(f'{API}/user/{user["id"]}').status_code == 204
    assert client.get(f'{API}/user/{user["id"]}').status_code == 404


def test_invalid_user_is_400(client):
    r = client.post(f'{API}/user', json={'email': 'not-an-email'})
    assert r.status_code == 400
    assert r.json()['message'] == 'User validation failed'


def test_me_without_auth_is_401(client):
    assert client.get(f'{API}/user/me').status_code == 401


def test_me_with_subject(client):
    from persona_chat.api.auth import get_current_subject
    from persona_chat.main import app

    app.dependency_overrides[get_current_subject] = lambda: 'auth0|grace'
    created = _create_user(client)

    r = client.get(f'{API}/user/me')

    assert r.status_code == 200
    assert r.json()['id'] == created['id']


def test_unknown_id_format_is_422(client):
    assert client.get(f'{API}/chat/not-a-uuid').status_code == 422


def test_image_upload_and_delete(client, image_store):
    r = client.post(
        f'{API}/image/upload',
        files={'file': ('portrait.png', b'\x89PNG data', 'image/png')},
    )
    assert r.status_code == 200, r.text
    url = r.json()['url']
    assert url.startswith('/uploads/personas/') and url.endswith('.png')

    name = url.rsplit('/', 1)[-1]
    assert (image_store.base_dir / name).exists()

    assert client.delete(f'{API}/image/{name}').status_code == 204
    assert not (image_store.base_dir / name).exists()


def test_image_upload_wrong_type_is_400(client):
    r = client.post(
        f'{API}/image/upload',
        files={'file': ('notes.txt', b'hello', 'text/plain')},
    )
    assert r.status_code == 400
    assert r.json()['message'] == 'Image validation failed'
    assert r.headers['Exception-Type'] == 'ImageValidationError'


def test_image_upload_storage_failure_is_400(client, tmp_path):
    from persona_chat.adapters.storage.local_images import LocalImageStore
    from persona_chat.infra.storage import get_image_store
    from persona_chat.main import app

    blocker = tmp_path / 'blocker'
    blocker.write_text('not a directory')
    app.dependency_overrides[get_image_store] = lambda: LocalImageStore(blocker / 'images')

    r = client.post(
        f'{API}/image/upload',
        files={'file': ('portrait.jpg', b'jpeg', 'image/jpeg')},
    )
    assert r.status_code == 400
    assert r.json()['exceptionType'] == 'ImageUploadError'
    assert r.json()['message'] == 'Image upload failed'
