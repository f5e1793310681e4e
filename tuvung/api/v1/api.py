from fastapi import APIRouter

from .endpoints import (
    catalog_router,
    enrichment_router,
    flashcard_router,
    practice_router,
    words_router,
)

api_router = APIRouter()

api_router.include_router(catalog_router.router, prefix="/catalog", tags=["Catalog"])
api_router.include_router(practice_router.router, prefix="/practice", tags=["Practice"])
api_router.include_router(flashcard_router.router, prefix="/flashcards", tags=["Flashcards"])
api_router.include_router(words_router.router, tags=["Words"])
api_router.include_router(enrichment_router.router, tags=["Enrichment"])
