from functools import lru_cache

from persona_chat.adapters.storage.local_images import LocalImageStore
from persona_chat.adapters.storage.local_training import LocalTrainingStore
from persona_chat.domain.ports.image_store import ImageStorePort
from persona_chat.domain.ports.training_store import TrainingStorePort
from persona_chat.settings import settings


@lru_cache(maxsize=1)
def get_training_store() -> TrainingStorePort:
    return LocalTrainingStore(settings.TRAINING_DATA_DIR)


@lru_cache(maxsize=1)
def get_image_store() -> ImageStorePort:
    return LocalImageStore(settings.IMAGE_STORAGE_DIR, settings.IMAGE_BASE_URL)
