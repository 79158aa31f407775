import re
from pathlib import Path
from typing import Iterator

FALLBACK_BASENAME = "file"

_UNSAFE = re.compile(r"[^a-z0-9_-]")
_DASHES = re.compile(r"-{2,}")


def sanitize_basename(label: str) -> str:
    """
    Transforme un libellé libre en nom de base sûr pour le disque.
    "Big Knife!" -> "big-knife" ; un résultat vide devient "file".
    """
    s = (label or "").strip().lower().replace(" ", "-")
    s = _UNSAFE.sub("", s)
    s = _DASHES.sub("-", s)
    return s or FALLBACK_BASENAME


def candidate_names(base: str, ext: str) -> Iterator[str]:
    """cat.png, cat-1.png, cat-2.png, ..."""
    yield f"{base}{ext}"
    i = 1
    while True:
        yield f"{base}-{i}{ext}"
        i += 1


def resolve_collision(directory: Path, base: str, ext: str) -> str:
    """
    Premier nom libre dans `directory` (vérification non atomique).
    """
    directory = Path(directory)
    return next(name for name in candidate_names(base, ext) if not (directory / name).exists())


def claim_unique_name(directory: Path, base: str, ext: str, max_attempts: int = 1000) -> Path:
    """
    Réserve un nom libre par création exclusive (O_EXCL).

    Même séquence de candidats que `resolve_collision`, mais deux écrivains
    concurrents ne peuvent pas obtenir le même nom. Le fichier réservé est
    vide : l'appelant doit le remplacer (os.replace) ou le supprimer.
    """
    directory = Path(directory)
    for attempt, name in enumerate(candidate_names(base, ext)):
        if attempt >= max_attempts:
            break
        path = directory / name
        try:
            with open(path, "xb"):
                pass
        except FileExistsError:
            continue
        return path
    raise FileExistsError(f"no free file name for {base}{ext} after {max_attempts} attempts")
