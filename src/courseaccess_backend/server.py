import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from courseaccess_backend.api.access import access_router, user_access_router
from courseaccess_backend.api.auth import TokenDirectory
from courseaccess_backend.api.courses import course_router
from courseaccess_backend.api.system import system_router
from courseaccess_backend.context import ServiceContainer, build_services
from courseaccess_backend.settings import settings

logger = logging.getLogger(__name__)


def create_app(services: Optional[ServiceContainer] = None, tokens: Optional[TokenDirectory] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is None:
            app.state.services = build_services()
            logger.info(f"Services built on the {settings.STORAGE_BACKEND} backend")
        if getattr(app.state, "tokens", None) is None:
            if settings.API_TOKENS_FILE:
                app.state.tokens = TokenDirectory.from_file(settings.API_TOKENS_FILE)
            elif settings.DEBUG_MODE == "production":
                raise RuntimeError("API_TOKENS_FILE is required in production")
            else:
                logger.warning("API_TOKENS_FILE not set, every request is anonymous")
                app.state.tokens = TokenDirectory()
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.services = services
    app.state.tokens = tokens

    origins = [
        "*"
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        course_router,
        prefix="/courses",
        tags=["courses"],
    )

    app.include_router(
        access_router,
        prefix="/courses",
        tags=["course access"],
    )

    app.include_router(
        user_access_router,
        prefix="/users",
        tags=["course access"],
    )

    app.include_router(
        system_router,
        prefix="/system",
        tags=["system"],
    )

    return app


app = create_app()
