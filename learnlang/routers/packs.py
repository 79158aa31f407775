import uuid
from typing import List

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND

from learnlang.core.deps import get_entity_store
from learnlang.core.errors import DuplicateKey, MissingFields, UnknownLanguage, UnknownPack
from learnlang.models.packs import Pack, PackDetail
from learnlang.schemas.packs import DataOut, PackCreateIn
from learnlang.services.entities import EntityStore
from learnlang.utils.keys import pack_key

router = APIRouter(prefix="/api/packs", tags=["packs"])


@router.get("", response_model=DataOut[List[Pack]])
def list_packs(store: EntityStore = Depends(get_entity_store)):
    return DataOut(data=store.list_packs())


@router.post("", response_model=DataOut[Pack], status_code=HTTP_201_CREATED)
def create_pack(payload: PackCreateIn, store: EntityStore = Depends(get_entity_store)):
    name = payload.name.strip()
    lang_id = payload.lang_id.strip()
    user_id = payload.user_id.strip()

    missing = [f for f, v in (("name", name), ("lang_id", lang_id), ("user_id", user_id)) if not v]
    if missing:
        raise MissingFields(missing)

    if store.get_language(lang_id) is None:
        raise UnknownLanguage(f"unsupported language id: {lang_id!r}")

    # sortie anticipée ; l'index unique tranche en cas de course
    key = pack_key(user_id, lang_id, name)
    if store.pack_exists(key):
        raise DuplicateKey(f"pack {name!r} already exists for user {user_id!r} and language {lang_id!r}")

    pack = Pack(id=str(uuid.uuid4()), name=name, lang_id=lang_id, user_id=user_id, public=payload.public)
    return DataOut(data=store.create_pack(pack))


@router.get("/{pack_id}", response_model=DataOut[PackDetail])
def get_pack(pack_id: str, store: EntityStore = Depends(get_entity_store)):
    pack_id = pack_id.strip()
    pack = store.get_pack_by_id(pack_id)
    if pack is None:
        raise UnknownPack(f"unknown pack id: {pack_id!r}", status_code=HTTP_404_NOT_FOUND)

    vocabs = store.list_vocabs_by_pack(pack.id)
    return DataOut(data=PackDetail(pack=pack, vocabs=vocabs))
