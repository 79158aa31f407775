from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from learnlang.core.deps import get_entity_store
from learnlang.core.errors import CODE_INVALID_PACKS, MissingFields, UnknownLanguage, UnknownPack
from learnlang.models.flashcards import Flashcard
from learnlang.schemas.packs import DataOut
from learnlang.services.entities import EntityStore
from learnlang.services.flashcards import clamp_limit, sample_flashcards

router = APIRouter(prefix="/api/flashcards", tags=["flashcards"])


def _pack_name_lookup(store: EntityStore):
    def lookup(pack_id: str) -> Optional[str]:
        pack = store.get_pack_by_id(pack_id)
        return pack.name if pack else None
    return lookup


@router.get("", response_model=DataOut[List[Flashcard]])
def get_flashcards(
    user_id: str = Query(default=""),
    lang_id: str = Query(default=""),
    pack_ids: str = Query(default="", description="Liste d'ids séparés par des virgules"),
    limit: Optional[str] = Query(default=None, description="1..100, 20 par défaut"),
    store: EntityStore = Depends(get_entity_store),
):
    user_id = user_id.strip()
    lang_id = lang_id.strip()

    missing = [f for f, v in (("user_id", user_id), ("lang_id", lang_id)) if not v]
    if missing:
        raise MissingFields(missing, what="query param")

    if store.get_language(lang_id) is None:
        raise UnknownLanguage(f"unsupported language id: {lang_id!r}")

    packs = [p.strip() for p in pack_ids.split(",") if p.strip()]
    for p in packs:
        if store.get_pack_by_id(p) is None:
            raise UnknownPack(f"unknown pack id: {p}", code=CODE_INVALID_PACKS)

    vocabs = store.list_vocabs(user_id, lang_id, packs or None)
    cards = sample_flashcards(vocabs, clamp_limit(limit), _pack_name_lookup(store))
    return DataOut(data=cards, meta={"count": len(cards)})
