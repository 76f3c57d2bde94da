import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from psycopg_pool import AsyncConnectionPool

from persona_chat.api.errors import register_exception_handlers
from persona_chat.api.routes import router
from persona_chat.domain.errors import GatewayConfigurationError
from persona_chat.infra.logging_config import configure_logging
from persona_chat.settings import GatewayConfig, require_setting, settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)

    app.state.dbpool = None
    app.state.inmem_repo = None
    app.state.gateway_config = None
    app.state.gateway_config_error = None

    try:
        app.state.gateway_config = GatewayConfig.from_settings(settings)
    except GatewayConfigurationError as e:
        # the API still serves CRUD; /message/send fails with a 500
        logger.warning('LLM gateway disabled: %s', e.message)
        app.state.gateway_config_error = e

    if settings.USE_INMEMORY_REPO:
        from persona_chat.adapters.repositories.memory import InMemoryRepository

        app.state.inmem_repo = InMemoryRepository()

    if not settings.DISABLE_DB_POOL:
        app.state.dbpool = AsyncConnectionPool(
            conninfo=require_setting('DATABASE_URL', settings.DATABASE_URL).encoded_string(),
            min_size=settings.POOL_MIN,
            max_size=settings.POOL_MAX,
            timeout=10,  # wait at most 10s when borrowing from the pool
            open=False,
        )
        await app.state.dbpool.open()
    try:
        yield
    finally:
        pool = getattr(app.state, 'dbpool', None)
        if pool is not None:
            await pool.close()


app = FastAPI(title='Persona Chat API', lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
    expose_headers=['Exception-Type'],
)

app.include_router(router)

register_exception_handlers(app)


@app.get('/', tags=['health'])
async def healthcheck():
    return {'status': 'ok', 'service': 'persona-chat'}
