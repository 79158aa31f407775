import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional

from learnlang.core.errors import ContentTooLarge, StorageUnavailable, UnsupportedContentType
from learnlang.services.content import SNIFF_LEN, is_image, resolve_extension, sniff_content_type
from learnlang.utils.filenames import claim_unique_name, sanitize_basename

logger = logging.getLogger(__name__)

IMAGES_SUBDIR = "images"
PUBLIC_PREFIX = "/files/"
IMAGES_PREFIX = f"{PUBLIC_PREFIX}{IMAGES_SUBDIR}/"

CHUNK_SIZE = 64 * 1024
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def verify_upload_dir_writable(root: str | Path) -> None:
    """
    Vérifie au démarrage que le dossier d'upload existe, est un dossier et
    est inscriptible. Ne crée rien : une erreur ici est fatale.
    """
    root = Path(root)
    if not root.exists():
        raise RuntimeError(f"upload dir {str(root)!r} does not exist")
    if not root.is_dir():
        raise RuntimeError(f"upload dir {str(root)!r} is not a directory")
    try:
        fd, probe = tempfile.mkstemp(prefix=".probe-", dir=root)
    except OSError as e:
        raise RuntimeError(f"upload dir {str(root)!r} is not writable: {e}") from e
    os.close(fd)
    os.remove(probe)


class BlobStore:
    """
    Stockage des images uploadées sur le disque local.

    Les fichiers vivent sous <root>/images/ et sont exposés par le serveur
    de fichiers statiques sous /files/images/<nom>.
    """

    def __init__(self, root: str | Path = "./uploads", max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES):
        self.root = Path(root)
        self.images_dir = self.root / IMAGES_SUBDIR
        self.incoming_dir = self.root / ".incoming"
        self.max_upload_bytes = max_upload_bytes

    @property
    def max_upload_mb(self) -> int:
        return self.max_upload_bytes // (1024 * 1024)

    def _too_large(self) -> ContentTooLarge:
        return ContentTooLarge(f"file too large; max {self.max_upload_mb}MB")

    def save_image(
        self,
        logical_name: str,
        original_filename: Optional[str],
        declared_content_type: Optional[str],
        stream: BinaryIO,
        declared_size: Optional[int] = None,
    ) -> str:
        """
        Sauvegarde une image et renvoie sa référence publique
        (ex: "/files/images/knife.png").

        Le type réel est détecté sur les premiers octets ; le type déclaré par
        le client n'est qu'informatif.
        """
        if declared_size is not None and declared_size > self.max_upload_bytes:
            raise self._too_large()

        try:
            self.images_dir.mkdir(parents=True, exist_ok=True)
            self.incoming_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"prepare images dir: {e}") from e

        head = stream.read(SNIFF_LEN)
        if len(head) > self.max_upload_bytes:
            raise self._too_large()

        content_type = sniff_content_type(head)
        if not is_image(content_type):
            raise UnsupportedContentType(f"unsupported file type: {content_type}")
        if declared_content_type and declared_content_type != content_type:
            logger.debug("Declared content type %s differs from sniffed %s", declared_content_type, content_type)
        ext = resolve_extension(original_filename, content_type)

        tmp_path = self._write_incoming(head, stream)
        base = sanitize_basename(logical_name)
        try:
            final_path = claim_unique_name(self.images_dir, base, ext)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageUnavailable(f"save file: {e}") from e

        try:
            os.replace(tmp_path, final_path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            final_path.unlink(missing_ok=True)
            raise StorageUnavailable(f"save file: {e}") from e

        logger.info("Stored image %s (%s)", final_path.name, content_type)
        return f"{IMAGES_PREFIX}{final_path.name}"

    def _write_incoming(self, head: bytes, stream: BinaryIO) -> Path:
        """
        Écrit tout le flux dans un fichier temporaire ; supprimé en cas
        d'erreur ou de dépassement de taille.
        """
        try:
            fd, name = tempfile.mkstemp(prefix="upload-", suffix=".part", dir=self.incoming_dir)
        except OSError as e:
            raise StorageUnavailable(f"write file: {e}") from e
        tmp_path = Path(name)
        total = len(head)
        try:
            with os.fdopen(fd, "wb") as out:
                out.write(head)
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    total += len(chunk)
                    if total > self.max_upload_bytes:
                        raise self._too_large()
                    out.write(chunk)
                out.flush()
                os.fsync(out.fileno())
        except ContentTooLarge:
            tmp_path.unlink(missing_ok=True)
            raise
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageUnavailable(f"write file: {e}") from e
        return tmp_path

    def path_for(self, reference: str) -> Path:
        """Chemin disque d'une référence renvoyée par `save_image`."""
        if not reference.startswith(IMAGES_PREFIX):
            raise ValueError(f"not an image reference: {reference!r}")
        name = reference[len(IMAGES_PREFIX):]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ValueError(f"invalid image reference: {reference!r}")
        return self.images_dir / name
