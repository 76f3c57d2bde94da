import os

import uvicorn

from persona_chat.migrate import run_migrations
from persona_chat.settings import settings

if __name__ == '__main__':
    if not settings.USE_INMEMORY_REPO:
        run_migrations()
    uvicorn.run(
        'persona_chat.main:app',
        host='0.0.0.0',
        port=int(os.getenv('PORT', '8000')),
    )
