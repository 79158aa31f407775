"""
Détection du type de contenu d'un upload à partir de ses premiers octets.

Deux étapes explicites :
  1. l'extension image du nom de fichier, si présente ;
  2. sinon, le type détecté par signature (JPEG, PNG, WEBP, GIF).
Aucun accès disque/réseau : même entrée => même résultat.
"""
from pathlib import PurePosixPath
from typing import Optional

from learnlang.core.errors import UnsupportedContentType

# Nombre d'octets lus pour la détection
SNIFF_LEN = 512

IMAGE_PREFIX = "image/"
OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN = "text/plain; charset=utf-8"

# (signature, type MIME) ; WEBP est traité à part (RIFF....WEBP)
_SIGNATURES: list[tuple[bytes, str]] = [
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
]

EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}

# extensions acceptées depuis le nom de fichier fourni par le client
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}

# Octets de contrôle qui trahissent un contenu binaire
_BINARY_BYTES = set(range(0x00, 0x09)) | {0x0B} | set(range(0x0E, 0x1A)) | set(range(0x1C, 0x20))


def sniff_content_type(head: bytes) -> str:
    head = head[:SNIFF_LEN]
    for signature, mime in _SIGNATURES:
        if head.startswith(signature):
            return mime
    if len(head) >= 12 and head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    if head and not any(b in _BINARY_BYTES for b in head):
        return TEXT_PLAIN
    return OCTET_STREAM


def is_image(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.startswith(IMAGE_PREFIX)


def filename_extension(filename: Optional[str]) -> str:
    """Extension image du nom de fichier (minuscules, avec le point), ou ""."""
    if not filename:
        return ""
    suffix = PurePosixPath(filename.replace("\\", "/")).suffix.lower()
    return suffix if suffix in IMAGE_EXTENSIONS else ""


def resolve_extension(filename: Optional[str], content_type: Optional[str]) -> str:
    ext = filename_extension(filename)
    if ext:
        return ext
    ext = EXTENSIONS.get(content_type or "")
    if ext:
        return ext
    raise UnsupportedContentType("file type could not be determined")
