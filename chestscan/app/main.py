# app/main.py
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .api_routes import router as api_router
from .config import settings
from .pages import router as pages_router
from .store import close_store, init_store

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    app.include_router(api_router, prefix="/api")
    app.include_router(pages_router)
    app.mount(
        "/static",
        StaticFiles(directory=str(Path(__file__).resolve().parent / "static")),
        name="static",
    )

    @app.on_event("startup")
    async def startup():
        await init_store()

    @app.on_event("shutdown")
    async def shutdown():
        await close_store()

    @app.get("/health")
    async def health():
        return {"service": "chestscan", "status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run(app, host=settings.host, port=settings.port)
