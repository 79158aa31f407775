import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.status import HTTP_201_CREATED

from learnlang.core.deps import get_entity_store, get_storage_service
from learnlang.core.errors import CODE_DUPLICATE_VOCAB, DuplicateKey, MissingFields, UnknownPack
from learnlang.models.packs import Vocab
from learnlang.schemas.packs import DataOut
from learnlang.services.entities import EntityStore
from learnlang.services.storage import BlobStore
from learnlang.utils.keys import vocab_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vocabs", tags=["vocabs"])


@router.post("", response_model=DataOut[Vocab], status_code=HTTP_201_CREATED)
def create_vocab(
    name: str = Form(default=""),
    translation: str = Form(default=""),
    pack_id: str = Form(default=""),
    image: Optional[UploadFile] = File(default=None),
    store: EntityStore = Depends(get_entity_store),
    storage: BlobStore = Depends(get_storage_service),
):
    name = name.strip()
    translation = translation.strip()
    pack_id = pack_id.strip()

    missing = []
    if not pack_id:
        missing.append("pack_id")
    if image is None or not image.filename:
        missing.append("image")
    if not name:
        missing.append("name")
    if not translation:
        missing.append("translation")
    if missing:
        raise MissingFields(missing)

    if store.get_pack_by_id(pack_id) is None:
        raise UnknownPack(f"unknown pack id: {pack_id!r}")

    if store.vocab_exists(vocab_key(pack_id, name)):
        raise DuplicateKey(f"vocab {name!r} already exists in this pack", code=CODE_DUPLICATE_VOCAB)

    # l'image n'est écrite qu'une fois la requête validée
    image_ref = storage.save_image(
        name,
        image.filename,
        image.content_type,
        image.file,
        declared_size=image.size,
    )

    vocab = Vocab(
        id=str(uuid.uuid4()),
        image=image_ref,
        name=name,
        translation=translation,
        pack_id=pack_id,
    )
    try:
        created = store.create_vocab(vocab)
    except Exception:
        # le fichier reste orphelin sur le disque (accepté, pas de suppression)
        logger.warning("Vocab %r not saved; image %s left orphaned", name, image_ref)
        raise
    return DataOut(data=created)
