"""
Clés composites d'unicité (pack, vocab).

Une clé n'est jamais stockée : elle sert uniquement aux vérifications
d'existence avant insertion. Une composante vide rend la clé invalide
(`None`), et une clé invalide n'existe jamais.
"""
from typing import NamedTuple, Optional


class PackKey(NamedTuple):
    owner: str
    language_id: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}:{self.language_id}:{self.name}"


class VocabKey(NamedTuple):
    pack_id: str
    name: str

    def __str__(self) -> str:
        return f"{self.pack_id}:{self.name}"


def normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def pack_key(owner: Optional[str], language_id: Optional[str], name: Optional[str]) -> Optional[PackKey]:
    parts = [normalize(owner), normalize(language_id), normalize(name)]
    if not all(parts):
        return None
    return PackKey(*parts)


def vocab_key(pack_id: Optional[str], name: Optional[str]) -> Optional[VocabKey]:
    parts = [normalize(pack_id), normalize(name)]
    if not all(parts):
        return None
    return VocabKey(*parts)
