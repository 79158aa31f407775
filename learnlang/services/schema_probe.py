import logging
import threading
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

VOCABS_TABLE = "vocabs"
TRANSLATION_COLUMN = "translation"


class SchemaCapabilities:
    """
    Colonnes optionnelles détectées dans la base (compatibilité avec les
    anciens schémas).

    Calculé une seule fois, à la première lecture, puis gardé pour toute la
    durée du process. `fixed()` permet d'injecter une valeur connue.
    """

    def __init__(self, engine: Optional[Engine] = None, has_vocab_translation: Optional[bool] = None):
        self._engine = engine
        self._has_vocab_translation = has_vocab_translation
        self._lock = threading.Lock()

    @classmethod
    def fixed(cls, has_vocab_translation: bool) -> "SchemaCapabilities":
        return cls(engine=None, has_vocab_translation=has_vocab_translation)

    @property
    def has_vocab_translation(self) -> bool:
        if self._has_vocab_translation is None:
            with self._lock:
                if self._has_vocab_translation is None:
                    self._has_vocab_translation = self._probe_translation()
        return self._has_vocab_translation

    def _probe_translation(self) -> bool:
        if self._engine is None:
            return False
        try:
            columns = inspect(self._engine).get_columns(VOCABS_TABLE)
        except SQLAlchemyError as e:
            logger.warning("Schema probe failed (%s); assuming no %s.%s", e, VOCABS_TABLE, TRANSLATION_COLUMN)
            return False
        found = any(c["name"] == TRANSLATION_COLUMN for c in columns)
        logger.info("Schema probe: %s.%s %s", VOCABS_TABLE, TRANSLATION_COLUMN, "present" if found else "absent")
        return found
