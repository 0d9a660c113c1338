# main.py
import logging

import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

from containers import container
from db import init_db
from endpoints.api_auth import router as api_auth_router
from endpoints.api_chats import router as api_chats_router
from endpoints.api_stream import router as api_stream_router

# Импортируем модули для 'wire'
import endpoints.api_auth as api_auth_module
import endpoints.api_chats as api_chats_module
import endpoints.api_stream as api_stream_module

settings = container.settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = container.engine()
    await init_db(engine)
    logger.info("Database ready (%s)", container.settings().environment)
    yield
    await engine.dispose()

app = FastAPI(title=settings.app_name, lifespan=lifespan)

# Подключаем контейнер к модулям.
# Это необходимо, чтобы декоратор @inject заработал.
container.wire(modules=[
    api_auth_module,
    api_chats_module,
    api_stream_module,
])

app.include_router(api_auth_router)
app.include_router(api_chats_router)
app.include_router(api_stream_router)


if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=False)
