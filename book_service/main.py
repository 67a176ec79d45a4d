# book_service/main.py
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .catalog import catalog_router
from .config import get_settings
from .storage import init_db


settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger("book_service")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Book service ready (price lookup %s)",
                "on" if settings.price_lookup_enabled else "off")
    yield


app = FastAPI(
    title="Book Service",
    description=(
        "Microservice de catalogue : CRUD et recherche de livres, avec un prix "
        "indicatif demandé à un LLM local en ligne de commande."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 🔹 Route de base pour tester rapidement
@app.get("/")
def health_check():
    return {"status": "ok", "message": "Book service live 🚀"}


app.include_router(catalog_router)


def run() -> None:
    """Entry point of the ``book-service`` console script."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
