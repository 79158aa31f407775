import random
from typing import Callable, Dict, List, Optional, Sequence

from learnlang.models.flashcards import Flashcard
from learnlang.models.packs import Vocab

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def clamp_limit(raw) -> int:
    """
    Limite demandée par le client -> [1, 100].
    Absente, non entière ou < 1 : valeur par défaut (20).
    """
    if raw is None:
        return DEFAULT_LIMIT
    try:
        n = int(str(raw).strip())
    except ValueError:
        return DEFAULT_LIMIT
    if n < 1:
        return DEFAULT_LIMIT
    return min(n, MAX_LIMIT)


def sample_flashcards(
    vocabs: Sequence[Vocab],
    limit: int,
    pack_name: Callable[[str], Optional[str]],
    rng: Optional[random.Random] = None,
) -> List[Flashcard]:
    """
    Mélange uniforme des vocabs puis troncature à `limit`.

    `pack_name(pack_id)` résout le nom affiché du pack (appelé une fois par
    pack). Un `rng` peut être injecté pour les tests ; sinon un nouveau
    générateur est créé à chaque appel.
    """
    if not vocabs:
        return []

    rng = rng or random.Random()
    items = list(vocabs)
    rng.shuffle(items)
    items = items[:max(limit, 0)]

    names: Dict[str, str] = {}
    cards: List[Flashcard] = []
    for v in items:
        if v.pack_id not in names:
            names[v.pack_id] = pack_name(v.pack_id) or ""
        cards.append(Flashcard(id=v.id, image=v.image, name=v.name, pack_name=names[v.pack_id]))
    return cards
