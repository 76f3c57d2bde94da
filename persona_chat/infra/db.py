from fastapi import Request

from persona_chat.adapters.repositories.pg import PgRepository
from persona_chat.domain.ports.repository import RepositoryPort
from persona_chat.settings import settings


def get_repo(request: Request) -> RepositoryPort:
    if settings.USE_INMEMORY_REPO:
        # shared for the app's lifetime, created in the lifespan
        return request.app.state.inmem_repo

    return PgRepository(pool=request.app.state.dbpool)
