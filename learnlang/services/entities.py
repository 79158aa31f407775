from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from sqlalchemy import delete, func, insert, literal, select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from learnlang.core.errors import (
    CODE_DUPLICATE_VOCAB,
    DuplicateKey,
    Internal,
    StorageUnavailable,
)
from learnlang.db import models as orm
from learnlang.models.packs import Language, Pack, Vocab
from learnlang.services.schema_probe import SchemaCapabilities
from learnlang.utils.keys import PackKey, VocabKey, pack_key, vocab_key

logger = logging.getLogger(__name__)

# erreurs "base indisponible" (connexion, timeout, verrou, fichier illisible) : ré-essayables.
# IntegrityError hérite de DBAPIError : toujours l'intercepter avant.
_UNAVAILABLE = (DBAPIError, PoolTimeoutError)


class EntityStore:
    """
    Accès aux langues, packs et vocabs.

    L'unicité repose sur les index uniques de la base : les appels
    `pack_exists` / `vocab_exists` faits par la couche HTTP ne sont qu'une
    sortie anticipée, l'insertion reste l'arbitre final (DuplicateKey).
    """

    def __init__(self, db: Session, capabilities: SchemaCapabilities):
        self.db = db
        self.capabilities = capabilities

    @contextmanager
    def _reading(self, what: str) -> Iterator[None]:
        try:
            yield
        except _UNAVAILABLE as e:
            self.db.rollback()
            logger.warning("Storage unavailable while reading %s: %s", what, e)
            raise StorageUnavailable(f"storage unavailable while reading {what}") from e

    # ------------------------------------------------------------------
    # Languages
    # ------------------------------------------------------------------
    def list_languages(self) -> List[Language]:
        # listing peu critique : on renvoie [] plutôt que d'échouer
        try:
            rows = self.db.execute(select(orm.Language).order_by(orm.Language.name)).scalars().all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to list languages: %s", e)
            return []
        return [Language.model_validate(r) for r in rows]

    def get_language(self, language_id: str) -> Optional[Language]:
        with self._reading("language"):
            row = self.db.get(orm.Language, language_id)
        return Language.model_validate(row) if row else None

    # ------------------------------------------------------------------
    # Packs
    # ------------------------------------------------------------------
    def _pack_key_clause(self, key: PackKey):
        return (
            (func.lower(orm.Pack.user_id) == key.owner)
            & (func.lower(orm.Pack.lang_id) == key.language_id)
            & (func.lower(orm.Pack.name) == key.name)
        )

    def pack_exists(self, key: Optional[PackKey]) -> bool:
        return self.get_pack_id_by_key(key) is not None

    def get_pack_id_by_key(self, key: Optional[PackKey]) -> Optional[str]:
        if key is None:
            return None
        with self._reading("pack"):
            return self.db.execute(
                select(orm.Pack.id).where(self._pack_key_clause(key)).limit(1)
            ).scalar_one_or_none()

    def create_pack(self, pack: Pack) -> Pack:
        row = orm.Pack(
            id=pack.id,
            name=pack.name,
            lang_id=pack.lang_id,
            user_id=pack.user_id,
            public=pack.public,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if self.pack_exists(pack_key(pack.user_id, pack.lang_id, pack.name)):
                raise DuplicateKey(
                    f"pack {pack.name!r} already exists for user {pack.user_id!r} and language {pack.lang_id!r}"
                ) from e
            logger.error("Pack insert rejected: %s", e)
            raise Internal("failed to save pack") from e
        except _UNAVAILABLE as e:
            self.db.rollback()
            raise StorageUnavailable("storage unavailable while saving pack") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Pack insert failed")
            raise Internal("failed to save pack") from e

        logger.info("Created pack %s (%s)", pack.id, pack_key(pack.user_id, pack.lang_id, pack.name))
        return Pack.model_validate(row)

    def get_pack_by_id(self, pack_id: str) -> Optional[Pack]:
        if not pack_id:
            return None
        with self._reading("pack"):
            row = self.db.get(orm.Pack, pack_id)
        return Pack.model_validate(row) if row else None

    def list_packs(self) -> List[Pack]:
        with self._reading("packs"):
            rows = self.db.execute(select(orm.Pack).order_by(orm.Pack.name)).scalars().all()
        return [Pack.model_validate(r) for r in rows]

    # ------------------------------------------------------------------
    # Vocabs
    # ------------------------------------------------------------------
    def _vocab_columns(self):
        v = orm.Vocab
        if self.capabilities.has_vocab_translation:
            translation = v.translation
        else:
            translation = literal(None).label("translation")
        return [v.id, v.image, v.name, translation, v.pack_id]

    @staticmethod
    def _to_vocab(row) -> Vocab:
        return Vocab(
            id=row.id,
            image=row.image,
            name=row.name,
            translation=row.translation,
            pack_id=row.pack_id,
        )

    def vocab_exists(self, key: Optional[VocabKey]) -> bool:
        if key is None:
            return False
        with self._reading("vocab"):
            found = self.db.execute(
                select(orm.Vocab.id)
                .where(func.lower(orm.Vocab.pack_id) == key.pack_id)
                .where(func.lower(orm.Vocab.name) == key.name)
                .limit(1)
            ).scalar_one_or_none()
        return found is not None

    def create_vocab(self, vocab: Vocab) -> Vocab:
        values = {
            "id": vocab.id,
            "image": vocab.image,
            "name": vocab.name,
            "pack_id": vocab.pack_id,
        }
        has_translation = self.capabilities.has_vocab_translation
        if has_translation:
            values["translation"] = vocab.translation
        # insert explicite : l'ORM écrirait la colonne translation même absente
        try:
            self.db.execute(insert(orm.Vocab.__table__).values(**values))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if self.vocab_exists(vocab_key(vocab.pack_id, vocab.name)):
                raise DuplicateKey(
                    f"vocab {vocab.name!r} already exists in this pack", code=CODE_DUPLICATE_VOCAB
                ) from e
            logger.error("Vocab insert rejected: %s", e)
            raise Internal("failed to save vocab") from e
        except _UNAVAILABLE as e:
            self.db.rollback()
            raise StorageUnavailable("storage unavailable while saving vocab") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Vocab insert failed")
            raise Internal("failed to save vocab") from e

        logger.info("Created vocab %s in pack %s", vocab.id, vocab.pack_id)
        return vocab.model_copy(update={"translation": vocab.translation if has_translation else None})

    def list_vocabs_by_pack(self, pack_id: str) -> List[Vocab]:
        if not pack_id:
            return []
        stmt = select(*self._vocab_columns()).where(orm.Vocab.pack_id == pack_id).order_by(orm.Vocab.name)
        with self._reading("vocabs"):
            rows = self.db.execute(stmt).all()
        return [self._to_vocab(r) for r in rows]

    def list_vocabs(self, owner: str, language_id: str, pack_ids: Optional[Sequence[str]] = None) -> List[Vocab]:
        stmt = (
            select(*self._vocab_columns())
            .join(orm.Pack, orm.Pack.id == orm.Vocab.pack_id)
            .where(orm.Pack.user_id == owner, orm.Pack.lang_id == language_id)
        )
        if pack_ids:
            stmt = stmt.where(orm.Vocab.pack_id.in_(list(pack_ids)))
        stmt = stmt.order_by(orm.Vocab.name)
        with self._reading("vocabs"):
            rows = self.db.execute(stmt).all()
        return [self._to_vocab(r) for r in rows]

    # ------------------------------------------------------------------
    # Tests
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Vide vocabs et packs (les langues sont conservées)."""
        try:
            self.db.execute(delete(orm.Vocab))
            self.db.execute(delete(orm.Pack))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageUnavailable("failed to reset storage") from e
        logger.warning("Entity store reset: packs and vocabs deleted")
