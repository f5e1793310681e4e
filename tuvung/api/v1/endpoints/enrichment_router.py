from fastapi import APIRouter, Depends, Query

from tuvung.api.v1.dependencies import (
    get_current_user,
    get_dictionary_service,
    get_draft_assistant,
    get_suggestion_service,
    get_translation_service,
)
from tuvung.schemas.enrichment_schema import DraftTextIn, SuggestionsOut, TranslateIn, TranslateOut
from tuvung.schemas.user_schema import CurrentUser
from tuvung.services.enrichment import (
    DictionaryResult,
    DictionaryService,
    DraftAssistant,
    DraftRefresh,
    SuggestionService,
    TextTranslation,
    TranslationService,
)

router = APIRouter()


@router.get("/dictionary/lookup", response_model=DictionaryResult)
def lookup_word(
    q: str = Query(..., min_length=1),
    dictionary: DictionaryService = Depends(get_dictionary_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    return dictionary.lookup(q)


@router.get("/dictionary/suggestions", response_model=SuggestionsOut)
def suggest_words(
    q: str = "",
    limit: int = Query(5, ge=1, le=20),
    suggestions: SuggestionService = Depends(get_suggestion_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    return SuggestionsOut(query=q, suggestions=suggestions.suggest(q, limit=limit))


@router.post("/dictionary/drafts/{draft_id}", response_model=DraftRefresh)
def refresh_draft(
    draft_id: str,
    payload: DraftTextIn,
    assistant: DraftAssistant = Depends(get_draft_assistant),
    current_user: CurrentUser = Depends(get_current_user),
):
    # Drafts are per user; two users may pick the same client-side id.
    result = assistant.refresh(f"{current_user.id}:{draft_id}", payload.text)
    return result.model_copy(update={"draft_id": draft_id})


@router.post("/translate", response_model=TranslateOut)
def translate_texts(
    payload: TranslateIn,
    translator: TranslationService = Depends(get_translation_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    return TranslateOut(translations=translator.translate(payload.texts, target=payload.target))


@router.get("/translate/text", response_model=TextTranslation)
def translate_text(
    q: str = "",
    source: str = Query("en", pattern="^(en|vi)$"),
    target: str = Query("vi", pattern="^(en|vi)$"),
    translator: TranslationService = Depends(get_translation_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    return translator.translate_text(q, source=source, target=target)
