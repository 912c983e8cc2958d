"""
Stockage des images d'annonces / Listing image storage.
Fichiers sur disque sous UPLOAD_DIR, servis en lecture seule sous MEDIA_URL.
Files on disk under UPLOAD_DIR, served read-only under MEDIA_URL.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.config import settings
from carrental.exceptions import ValidationError

log = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}
ALLOWED_MIME_TYPES = {"image/jpeg", "image/png"}
IMAGE_FOLDER = "announcements"


@dataclass
class ImageUpload:
    """Image reçue, déjà lue en mémoire / Received image, already read into memory."""
    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def extension(self) -> str:
        return Path(self.filename or "").suffix.lower()


def validate_images(images: list[ImageUpload]) -> None:
    """Vérifier nombre, format et taille / Check count, format and size."""
    errors: dict[str, list[str]] = {}
    if len(images) > settings.MAX_IMAGES_PER_LISTING:
        errors["images"] = [f"The images field must not have more than {settings.MAX_IMAGES_PER_LISTING} items."]
    for index, image in enumerate(images):
        messages = []
        if image.extension not in ALLOWED_EXTENSIONS or (
            image.content_type and image.content_type not in ALLOWED_MIME_TYPES
        ):
            messages.append("The image must be a file of type: jpeg, png, jpg.")
        if len(image.content) > settings.MAX_IMAGE_SIZE:
            messages.append(f"The image must not be greater than {settings.MAX_IMAGE_SIZE // 1024} kilobytes.")
        if messages:
            errors[f"images.{index}"] = messages
    if errors:
        raise ValidationError(errors)


class ImageStore:
    """Stockage local / Local filesystem storage."""

    def __init__(self, root: Path, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def save(self, image: ImageUpload, filename: str) -> str:
        """Écrire le fichier, retourner sa référence relative / Write the file, return its relative ref."""
        folder = self.root / IMAGE_FOLDER
        folder.mkdir(parents=True, exist_ok=True)
        (folder / filename).write_bytes(image.content)
        return f"{IMAGE_FOLDER}/{filename}"

    def delete(self, ref: str) -> None:
        """Supprimer ; un fichier absent n'est pas une erreur / Delete; a missing file is not an error."""
        path = self.root / ref
        try:
            path.unlink(missing_ok=True)
        except OSError:
            log.warning("Could not delete image %s", path, exc_info=True)

    def delete_after_commit(self, db: AsyncSession, refs: list[str]) -> None:
        """
        Supprimer une fois la transaction validée / Delete once the transaction commits.
        Sur rollback les fichiers restent en place / On rollback the files are left in place.
        """
        if not refs:
            return
        pending = list(refs)

        def _delete(session) -> None:
            for ref in pending:
                self.delete(ref)

        event.listen(db.sync_session, "after_commit", _delete, once=True)

    def url_for(self, ref: str) -> str:
        return f"{self.base_url}/{ref}"


_store = ImageStore(Path(settings.UPLOAD_DIR), settings.MEDIA_URL)


def get_image_store() -> ImageStore:
    """Dépendance FastAPI / FastAPI dependency."""
    return _store
