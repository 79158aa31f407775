from fastapi import APIRouter, Depends

from learnlang.core.deps import get_entity_store
from learnlang.core.security import get_api_key
from learnlang.services.entities import EntityStore

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/reset")
def reset_data(
    store: EntityStore = Depends(get_entity_store),
    _: str = Depends(get_api_key),
):
    """Vide packs et vocabs (les langues restent). Réservé aux tests/démo."""
    store.reset()
    return {"ok": True, "message": "packs and vocabs deleted"}
