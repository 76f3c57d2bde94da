from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    BUSINESS = 'business'
    TECHNICAL = 'technical'


class ErrorKind(str, Enum):
    # business: caused by the caller, safe to disclose
    CHAT_NOT_FOUND = 'chat_not_found'
    MESSAGE_NOT_FOUND = 'message_not_found'
    PERSONA_NOT_FOUND = 'persona_not_found'
    USER_NOT_FOUND = 'user_not_found'
    CHAT_VALIDATION = 'chat_validation'
    MESSAGE_VALIDATION = 'message_validation'
    PERSONA_VALIDATION = 'persona_validation'
    USER_VALIDATION = 'user_validation'
    CHAT_DUPLICATE = 'chat_duplicate'
    MESSAGE_DUPLICATE = 'message_duplicate'
    PERSONA_DUPLICATE_DISPLAY_NAME = 'persona_duplicate_display_name'
    USER_DUPLICATE_EMAIL = 'user_duplicate_email'
    IMAGE_UPLOAD = 'image_upload'
    IMAGE_VALIDATION = 'image_validation'
    TRAINING_STORAGE = 'training_storage'

    # technical: infrastructure or integration failure, never disclosed
    GATEWAY_API = 'gateway_api'
    GATEWAY_CONNECTION = 'gateway_connection'
    GATEWAY_CONFIGURATION = 'gateway_configuration'
    CONFIGURATION_SETTING_MISSING = 'configuration_setting_missing'
    CONFIGURATION_SETTING_EMPTY = 'configuration_setting_empty'


_B = ErrorCategory.BUSINESS
_T = ErrorCategory.TECHNICAL

# kind -> (category, reason)
KIND_INFO = {
    ErrorKind.CHAT_NOT_FOUND: (_B, 'Chat not found'),
    ErrorKind.MESSAGE_NOT_FOUND: (_B, 'Message not found'),
    ErrorKind.PERSONA_NOT_FOUND: (_B, 'Persona not found'),
    ErrorKind.USER_NOT_FOUND: (_B, 'User not found'),
    ErrorKind.CHAT_VALIDATION: (_B, 'Chat validation failed'),
    ErrorKind.MESSAGE_VALIDATION: (_B, 'Message validation failed'),
    ErrorKind.PERSONA_VALIDATION: (_B, 'Persona validation failed'),
    ErrorKind.USER_VALIDATION: (_B, 'User validation failed'),
    ErrorKind.CHAT_DUPLICATE: (_B, 'Chat already exists'),
    ErrorKind.MESSAGE_DUPLICATE: (_B, 'Message already exists'),
    ErrorKind.PERSONA_DUPLICATE_DISPLAY_NAME: (_B, 'Persona DisplayName already exists'),
    ErrorKind.USER_DUPLICATE_EMAIL: (_B, 'User Email already exists'),
    ErrorKind.IMAGE_UPLOAD: (_B, 'Image upload failed'),
    ErrorKind.IMAGE_VALIDATION: (_B, 'Image validation failed'),
    ErrorKind.TRAINING_STORAGE: (_B, 'Training storage operation failed'),
    ErrorKind.GATEWAY_API: (_T, 'Gateway API error'),
    ErrorKind.GATEWAY_CONNECTION: (_T, 'Gateway connection error'),
    ErrorKind.GATEWAY_CONFIGURATION: (_T, 'Gateway configuration error'),
    ErrorKind.CONFIGURATION_SETTING_MISSING: (_T, 'Configuration Setting Missing'),
    ErrorKind.CONFIGURATION_SETTING_EMPTY: (_T, 'Configuration Setting Value Empty'),
}

NOT_FOUND_KINDS = frozenset({
    ErrorKind.CHAT_NOT_FOUND,
    ErrorKind.MESSAGE_NOT_FOUND,
    ErrorKind.PERSONA_NOT_FOUND,
    ErrorKind.USER_NOT_FOUND,
})


class PlatformError(Exception):
    """Base class for every error the platform raises on purpose.

    Each error is tagged with an ``ErrorKind``. The kind decides the
    category (business or technical) and the short ``reason`` that is
    always safe to show to an end user. ``message`` is the technical
    description: it is logged, and only business errors may echo it.

    Concrete subclasses only bind ``kind``; callers can still catch
    them by name.
    """

    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        kind: Optional[ErrorKind] = None,
    ):
        if not message or not message.strip():
            raise ValueError('error message must not be empty')

        kind = kind or type(self).kind
        if kind is None:
            raise TypeError(f'{type(self).__name__} has no error kind')

        super().__init__(message)
        self.message = message
        self.kind = kind
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def category(self) -> ErrorCategory:
        return KIND_INFO[self.kind][0]

    @property
    def reason(self) -> str:
        return KIND_INFO[self.kind][1]

    @property
    def is_business(self) -> bool:
        return self.category == ErrorCategory.BUSINESS

    @property
    def is_technical(self) -> bool:
        return self.category == ErrorCategory.TECHNICAL

    @property
    def is_not_found(self) -> bool:
        return self.kind in NOT_FOUND_KINDS

    def __repr__(self) -> str:
        return f'{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})'


# grouping bases, for `except` clauses
class BusinessError(PlatformError):
    pass


class NotFoundError(BusinessError):
    pass


class TechnicalError(PlatformError):
    pass


class GatewayError(TechnicalError):
    pass


# 404
class ChatNotFoundError(NotFoundError):
    kind = ErrorKind.CHAT_NOT_FOUND


class MessageNotFoundError(NotFoundError):
    kind = ErrorKind.MESSAGE_NOT_FOUND


class PersonaNotFoundError(NotFoundError):
    kind = ErrorKind.PERSONA_NOT_FOUND


class UserNotFoundError(NotFoundError):
    kind = ErrorKind.USER_NOT_FOUND


# 400
class ChatValidationError(BusinessError):
    kind = ErrorKind.CHAT_VALIDATION


class MessageValidationError(BusinessError):
    kind = ErrorKind.MESSAGE_VALIDATION


class PersonaValidationError(BusinessError):
    kind = ErrorKind.PERSONA_VALIDATION


class UserValidationError(BusinessError):
    kind = ErrorKind.USER_VALIDATION


class ChatDuplicateError(BusinessError):
    kind = ErrorKind.CHAT_DUPLICATE


class MessageDuplicateError(BusinessError):
    kind = ErrorKind.MESSAGE_DUPLICATE


class PersonaDuplicateDisplayNameError(BusinessError):
    kind = ErrorKind.PERSONA_DUPLICATE_DISPLAY_NAME


class UserDuplicateEmailError(BusinessError):
    kind = ErrorKind.USER_DUPLICATE_EMAIL


class ImageUploadError(BusinessError):
    kind = ErrorKind.IMAGE_UPLOAD


class ImageValidationError(BusinessError):
    kind = ErrorKind.IMAGE_VALIDATION


class TrainingStorageError(BusinessError):
    kind = ErrorKind.TRAINING_STORAGE


# 500
class GatewayApiError(GatewayError):
    """The remote service answered, but with an error or unusable payload."""

    kind = ErrorKind.GATEWAY_API


class GatewayConnectionError(GatewayError):
    """The remote service could not be reached (network, TLS, timeout)."""

    kind = ErrorKind.GATEWAY_CONNECTION


class GatewayConfigurationError(GatewayError):
    """Outbound credentials or settings are missing or invalid."""

    kind = ErrorKind.GATEWAY_CONFIGURATION


class ConfigurationSettingMissingError(TechnicalError):
    kind = ErrorKind.CONFIGURATION_SETTING_MISSING


class ConfigurationSettingEmptyError(TechnicalError):
    kind = ErrorKind.CONFIGURATION_SETTING_EMPTY
