import re
from pathlib import PurePath
from typing import List, Optional, Sequence

from persona_chat.domain.enums import Role
from persona_chat.domain.errors import (ChatValidationError,
                                        ImageValidationError,
                                        MessageValidationError,
                                        PersonaValidationError,
                                        UserValidationError)
from persona_chat.domain.models import (Chat, ImageUpload, Message,
                                        Persona, User)

MESSAGE_CONTENT_MAX_LENGTH = 10_000
VALID_ROLES = frozenset(r.value for r in Role)

IMAGE_MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp', '.gif')
IMAGE_CONTENT_TYPES = ('image/jpeg', 'image/jpg', 'image/png', 'image/webp', 'image/gif')

_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$', re.IGNORECASE)
_PHONE_RE = re.compile(r'^\+?[1-9]\d{0,15}$')
# full http(s) URL or an absolute path such as /uploads/personas/x.jpg
_URL_RE = re.compile(
    r'^(https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}(\.[a-zA-Z0-9()]{1,6})?(:[0-9]{1,5})?'
    r'(/[-a-zA-Z0-9()@:%_+.~#?&/=]*)?|/[-a-zA-Z0-9()@:%_+.~#?&/=]+)$',
    re.IGNORECASE,
)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _required(field: str, value: Optional[str]) -> Optional[str]:
    if _is_blank(value):
        return f'{field} is required.'
    return None


def _raise_if_any(errors: List[str], error_cls) -> None:
    if errors:
        raise error_cls('; '.join(errors))


def validate_user(user: User) -> None:
    errors: List[str] = []

    # first/last name are optional: external-auth users may not provide them
    error = _required('email', user.email)
    if error:
        errors.append(error)
    elif not _EMAIL_RE.match(user.email):
        errors.append('email has an invalid email format.')

    if not _is_blank(user.phone) and not _PHONE_RE.match(user.phone):
        errors.append('phone has an invalid phone format.')

    _raise_if_any(errors, UserValidationError)


def validate_persona(persona: Persona) -> None:
    errors: List[str] = []

    error = _required('display_name', persona.display_name)
    if error:
        errors.append(error)

    if not _is_blank(persona.profile_image_url) and not _URL_RE.match(persona.profile_image_url):
        errors.append('profile_image_url has an invalid URL format.')

    _raise_if_any(errors, PersonaValidationError)


def validate_chat(chat: Chat) -> None:
    errors: List[str] = []

    if chat.persona_id is None:
        errors.append('persona_id is required.')
    if chat.user_id is None:
        errors.append('user_id is required.')
    if chat.last_message_at is None:
        errors.append('last_message_at is required.')

    _raise_if_any(errors, ChatValidationError)


def validate_message(message: Message) -> None:
    errors: List[str] = []

    if message.chat_id is None:
        errors.append('chat_id is required.')

    error = _required('role', message.role)
    if error:
        errors.append(error)
    elif message.role not in VALID_ROLES:
        errors.append("role must be either 'user' or 'assistant'.")

    error = _required('content', message.content)
    if error:
        errors.append(error)
    elif len(message.content) > MESSAGE_CONTENT_MAX_LENGTH:
        errors.append(f'content must not exceed {MESSAGE_CONTENT_MAX_LENGTH} characters.')

    _raise_if_any(errors, MessageValidationError)


def validate_image_upload(
    upload: ImageUpload,
    *,
    max_file_size: int = IMAGE_MAX_FILE_SIZE_BYTES,
    allowed_extensions: Sequence[str] = IMAGE_EXTENSIONS,
    allowed_content_types: Sequence[str] = IMAGE_CONTENT_TYPES,
) -> None:
    """Stops at the first problem, unlike the entity validators."""
    if upload.content is None:
        raise ImageValidationError('No file provided')
    if _is_blank(upload.file_name):
        raise ImageValidationError('Filename is required')

    if upload.size <= 0:
        raise ImageValidationError('File size must be greater than zero')
    if upload.size > max_file_size:
        raise ImageValidationError(
            f'File size exceeds maximum allowed size of {max_file_size // 1024 // 1024}MB'
        )

    extension = PurePath(upload.file_name).suffix.lower()
    if not extension or extension not in allowed_extensions:
        raise ImageValidationError(
            f'File type not allowed. Allowed types: {", ".join(allowed_extensions)}'
        )

    if _is_blank(upload.content_type):
        raise ImageValidationError('Content type is required')
    if upload.content_type.lower() not in allowed_content_types:
        raise ImageValidationError('Invalid file content type')


def validate_image_file_name(file_name: Optional[str]) -> None:
    if _is_blank(file_name):
        raise ImageValidationError('Filename is required for deletion')
    # a bare name inside the image directory, nothing path-like
    if PurePath(file_name).name != file_name or file_name in ('.', '..') or '\\' in file_name:
        raise ImageValidationError(f'Invalid image file name: {file_name}')
