"""
File storage for product images and documents.

Files live on local disk under UPLOAD_FOLDER, split into a public folder
for images and a documents folder. Stored paths have the form
'{folder}/{owner id}/{timestamp_ms}_{secure filename}'; the owner segment
decides who may delete the file.
"""

import os
import time
from typing import Optional

from flask import current_app, url_for
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from marketplace.constants import (
    ALLOWED_DOCUMENT_EXTENSIONS,
    ALLOWED_IMAGE_EXTENSIONS,
    MAX_UPLOAD_BYTES,
)
from marketplace.dataclasses import StoredFile
from marketplace.enums import UploadFolder
from marketplace.logger import get_logger, log_audit
from marketplace.services.base import AuthorizationError, NotFoundError, ValidationError
from marketplace.utils import utc_now

logger = get_logger(__name__)


class StorageService:
    """Saves, resolves and deletes uploaded files."""

    def __init__(self, root: Optional[str] = None):
        self._root = root

    @property
    def root(self) -> str:
        return os.path.realpath(self._root or current_app.config['UPLOAD_FOLDER'])

    def save(
        self,
        file: Optional[FileStorage],
        folder: Optional[str] = None,
        owner_id: Optional[str] = None
    ) -> StoredFile:
        """Validate and store an uploaded file.

        Args:
            file: The uploaded file from request.files.
            folder: 'public' (default) or 'documents'.
            owner_id: Profile id of the uploader.

        Returns:
            Metadata for the stored file.

        Raises:
            ValidationError: If the file is missing, too large, or of a
                type that is not allowed.
        """
        if file is None or not file.filename:
            raise ValidationError("No file provided")
        owner = secure_filename(owner_id or '')
        if not owner:
            raise ValidationError("Uploader is required")

        target = UploadFolder.parse(folder or UploadFolder.PUBLIC.value)
        if target is None:
            raise ValidationError("Folder must be public or documents")

        name = secure_filename(file.filename)
        extension = name.rsplit('.', 1)[-1].lower() if '.' in name else ''
        if extension not in ALLOWED_IMAGE_EXTENSIONS | ALLOWED_DOCUMENT_EXTENSIONS:
            raise ValidationError("Invalid file type")

        file.stream.seek(0, os.SEEK_END)
        size = file.stream.tell()
        file.stream.seek(0)
        if size > MAX_UPLOAD_BYTES:
            raise ValidationError("File size exceeds 10MB limit")

        file_id = f"{int(time.time() * 1000)}_{name}"
        path = f"{target.value}/{owner}/{file_id}"
        directory = os.path.join(self.root, target.value, owner)
        os.makedirs(directory, exist_ok=True)
        file.save(os.path.join(directory, file_id))

        logger.info(f"Stored upload {path} ({size} bytes)")
        log_audit('file_uploaded', 'file', path, {'size': size, 'owner': owner})
        return StoredFile(
            id=path,
            name=file.filename,
            url=url_for('main.serve_upload', path=path),
            size=size,
            type=file.mimetype or 'application/octet-stream',
            uploaded_at=utc_now().isoformat() + 'Z',
        )

    def resolve(self, path: str) -> str:
        """Map a stored path to an absolute location inside the upload root.

        Raises:
            ValidationError: If the path escapes the upload root or does not
                start with a known folder.
            NotFoundError: If no such file exists.
        """
        root = self.root
        folder = (path or '').split('/', 1)[0]
        if UploadFolder.parse(folder) is None or folder != folder.lower():
            raise ValidationError("Invalid file path")

        location = os.path.realpath(os.path.join(root, path))
        if not location.startswith(root + os.sep):
            raise ValidationError("Invalid file path")
        if not os.path.isfile(location):
            raise NotFoundError("File not found")
        return location

    @staticmethod
    def owner_of(path: str) -> Optional[str]:
        """Owner segment of a stored path, None for paths without one."""
        parts = (path or '').split('/')
        return parts[1] if len(parts) == 3 else None

    def delete(self, path: str, actor_id: Optional[str] = None, actor_is_admin: bool = False) -> None:
        """Remove a stored file.

        Only the uploader or an admin may delete it.

        Raises:
            AuthorizationError: If the actor did not upload the file.
        """
        location = self.resolve(path)
        if not actor_is_admin and (not actor_id or self.owner_of(path) != actor_id):
            raise AuthorizationError("You can only delete your own files")
        os.remove(location)
        logger.info(f"Deleted upload {path}")
        log_audit('file_deleted', 'file', path)


# Singleton instance for use in routes
storage_service = StorageService()
