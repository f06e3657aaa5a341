# staffbook/main.py
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI
from tortoise.contrib.fastapi import register_tortoise
from staffbook.core.config import settings
from staffbook.core.db import TORTOISE_ORM
from staffbook.api.imports import router as import_router
from staffbook.api.exports import router as export_router


def create_app(with_db: bool = True) -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.APP_NAME)
    app.include_router(import_router)
    app.include_router(export_router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "app": settings.APP_NAME}

    if with_db:
        register_tortoise(
            app,
            config=TORTOISE_ORM,
            generate_schemas=settings.GENERATE_SCHEMAS,
            add_exception_handlers=True,
        )
    return app


app = create_app()
