from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from persona_chat.domain.errors import (ChatNotFoundError,
                                        ChatValidationError,
                                        PersonaDuplicateDisplayNameError,
                                        PersonaNotFoundError,
                                        TrainingStorageError,
                                        UserDuplicateEmailError,
                                        UserNotFoundError,
                                        UserValidationError)
from persona_chat.domain.models import Chat, Persona, User
from persona_chat.services.chat_service import ChatService, later_of
from persona_chat.services.persona_service import PersonaService
from persona_chat.services.user_service import UserService
from tests.fakes import seed_chat


@pytest.fixture
def users(repo):
    return UserService(repo=repo)


@pytest.fixture
def personas(repo, training_store):
    return PersonaService(repo=repo, training_store=training_store)


@pytest.fixture
def chats(repo):
    return ChatService(repo=repo)


# ---------- users ----------

@pytest.mark.asyncio
async def test_create_and_get_user(users):
    created = await users.create_user(User(first_name='Grace', email='grace@example.com'))
    assert (await users.get_user(created.id)).email == 'grace@example.com'


@pytest.mark.asyncio
async def test_duplicate_email_is_rejected_case_insensitively(users):
    await users.create_user(User(email='grace@example.com'))
    with pytest.raises(UserDuplicateEmailError):
        await users.create_user(User(email='GRACE@example.com'))


@pytest.mark.asyncio
async def test_similar_email_is_not_a_duplicate(users):
    await users.create_user(User(email='grace@example.com'))
    await users.create_user(User(email='race@example.com'))


@pytest.mark.asyncio
async def test_duplicate_auth_subject_is_rejected(users):
    await users.create_user(User(email='a@example.com', auth_sub='auth0|1'))
    with pytest.raises(UserDuplicateEmailError):
        await users.create_user(User(email='b@example.com', auth_sub='auth0|1'))


@pytest.mark.asyncio
async def test_update_user_keeps_own_email(users):
    created = await users.create_user(User(email='grace@example.com'))
    created.last_name = 'Hopper'
    updated = await users.update_user(created)
    assert updated.last_name == 'Hopper'


@pytest.mark.asyncio
async def test_invalid_user_is_rejected(users):
    with pytest.raises(UserValidationError):
        await users.create_user(User(email='nope'))


@pytest.mark.asyncio
async def test_absent_user_raises_not_found(users):
    with pytest.raises(UserNotFoundError):
        await users.get_user(uuid4())
    with pytest.raises(UserNotFoundError):
        await users.update_user(User(id=uuid4(), email='x@example.com'))
    with pytest.raises(UserNotFoundError):
        await users.delete_user(uuid4())
    with pytest.raises(UserNotFoundError):
        await users.get_user_by_auth_sub('auth0|missing')


# ---------- personas ----------

@pytest.mark.asyncio
async def test_duplicate_display_name_is_rejected(personas):
    await personas.create_persona(Persona(display_name='Ada'))
    with pytest.raises(PersonaDuplicateDisplayNameError):
        await personas.create_persona(Persona(display_name='ada'))


@pytest.mark.asyncio
async def test_rename_onto_existing_display_name_is_rejected(personas):
    await personas.create_persona(Persona(display_name='Ada'))
    grace = await personas.create_persona(Persona(display_name='Grace'))
    grace.display_name = 'Ada'
    with pytest.raises(PersonaDuplicateDisplayNameError):
        await personas.update_persona(grace)


@pytest.mark.asyncio
async def test_delete_persona(personas):
    ada = await personas.create_persona(Persona(display_name='Ada'))
    await personas.delete_persona(ada.id)
    with pytest.raises(PersonaNotFoundError):
        await personas.get_persona(ada.id)


@pytest.mark.asyncio
async def test_training_round_trip(personas):
    ada = await personas.create_persona(Persona(display_name='Ada'))

    updated = await personas.update_training(ada.id, 'Mathematician.')

    assert updated.training_file_path.startswith('file:///')
    assert updated.training_file_path.endswith(f'{ada.id}-general.txt')
    assert await personas.get_training(ada.id) == 'Mathematician.'


@pytest.mark.asyncio
async def test_blank_training_clears_it(personas, training_store):
    ada = await personas.create_persona(Persona(display_name='Ada'))
    await personas.update_training(ada.id, 'Mathematician.')

    updated = await personas.update_training(ada.id, '')

    assert updated.training_file_path is None
    assert await personas.get_training(ada.id) == ''
    assert not training_store.path_for(ada.id).exists()


@pytest.mark.asyncio
async def test_oversized_training_keeps_previous(personas):
    ada = await personas.create_persona(Persona(display_name='Ada'))
    await personas.update_training(ada.id, 'Mathematician.')

    with pytest.raises(TrainingStorageError):
        await personas.update_training(ada.id, 'x' * 5001)

    assert await personas.get_training(ada.id) == 'Mathematician.'


@pytest.mark.asyncio
async def test_training_for_absent_persona(personas):
    assert await personas.get_training(uuid4()) == ''
    with pytest.raises(PersonaNotFoundError):
        await personas.update_training(uuid4(), 'x')


@pytest.mark.asyncio
async def test_training_without_store_is_a_storage_error(repo):
    service = PersonaService(repo=repo)
    ada = await service.create_persona(Persona(display_name='Ada'))
    with pytest.raises(TrainingStorageError):
        await service.update_training(ada.id, 'x')


# ---------- chats ----------

def test_later_of():
    now = datetime.now(timezone.utc)
    earlier = now - timedelta(minutes=1)
    assert later_of(earlier, now) == now
    assert later_of(now, earlier) == now
    assert later_of(None, now) == now
    assert later_of(now, None) == now


def test_later_of_treats_naive_as_utc():
    aware = datetime(2025, 1, 1, 12, tzinfo=timezone.utc)
    naive_later = datetime(2025, 1, 1, 13)

    assert later_of(aware, naive_later) == datetime(2025, 1, 1, 13, tzinfo=timezone.utc)
    assert later_of(naive_later, None).tzinfo is timezone.utc


@pytest.mark.asyncio
async def test_create_chat_requires_fields(chats):
    with pytest.raises(ChatValidationError):
        await chats.create_chat(Chat(title='no ids'))


@pytest.mark.asyncio
async def test_update_chat_never_moves_last_message_at_back(chats, repo):
    _, _, chat = await seed_chat(repo)
    original = chat.last_message_at

    chat.title = 'Renamed'
    chat.last_message_at = original - timedelta(days=3)
    updated = await chats.update_chat(chat)

    assert updated.title == 'Renamed'
    assert updated.last_message_at == original


@pytest.mark.asyncio
async def test_update_chat_without_timestamp_keeps_it(chats, repo):
    _, _, chat = await seed_chat(repo)
    original = chat.last_message_at

    updated = await chats.update_chat(chat.model_copy(update={'last_message_at': None}))

    assert updated.last_message_at == original


@pytest.mark.asyncio
async def test_absent_chat_raises_not_found(chats):
    with pytest.raises(ChatNotFoundError):
        await chats.get_chat(uuid4())
    with pytest.raises(ChatNotFoundError):
        await chats.delete_chat(uuid4())
    with pytest.raises(ChatNotFoundError):
        await chats.update_chat(Chat(id=uuid4(), persona_id=uuid4(), user_id=uuid4()))
