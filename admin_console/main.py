import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .categories.categories import router as categories_router
from .config import Settings
from .database import Base, build_engine, build_session_factory
from .deps import add_cors
from .errors import register_exception_handlers
from .media.lifecycle import ProductMediaLifecycle
from .models.category import Category  # noqa: F401  (registers the table)
from .models.product import Product  # noqa: F401
from .products.products import router as products_router

log = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    media = settings.media()
    engine = build_engine(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        log.info("🚀 Admin console API starting up...")
        Base.metadata.create_all(bind=engine)
        app.state.media_lifecycle.storage.ensure_root()
        log.info(f"📁 Product images stored in {os.path.abspath(media.root)}")
        yield
        # Shutdown
        log.info("🛑 Admin console API shutting down...")
        engine.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Manage products, categories and product images",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.media_lifecycle = ProductMediaLifecycle(media)

    add_cors(app, settings.cors_origins)
    register_exception_handlers(app)

    app.include_router(products_router, prefix=settings.API_PREFIX)
    app.include_router(categories_router, prefix=settings.API_PREFIX)

    # Uploaded images are served as-is
    app.mount(media.url_prefix, StaticFiles(directory=media.root, check_dir=False), name="product-images")

    @app.get("/api/test")
    async def api_test():
        return {"message": "Server is running successfully"}

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


_settings = Settings()
configure_logging(_settings.LOG_LEVEL)
app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", 5000))
    uvicorn.run("admin_console.main:app", host="0.0.0.0", port=port, log_level="info")
