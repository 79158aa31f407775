from typing import List
from fastapi import APIRouter, Depends

from learnlang.core.deps import get_entity_store
from learnlang.models.packs import Language
from learnlang.schemas.packs import DataOut
from learnlang.services.entities import EntityStore

router = APIRouter(prefix="/api/languages", tags=["languages"])


@router.get("", response_model=DataOut[List[Language]])
def list_languages(store: EntityStore = Depends(get_entity_store)):
    return DataOut(data=store.list_languages())
