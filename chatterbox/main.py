from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatterbox.config import settings
from chatterbox.database import init_db
from chatterbox.errors import register_error_handlers
from chatterbox.logging_config import setup_logging
from chatterbox.routers import auth, health, prompts


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Chatterbox Backend", lifespan=lifespan)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(prompts.router, prefix="/api/v1")

    @app.get("/")
    def root():
        return {"status": "Backend running"}

    return app


app = create_app()
