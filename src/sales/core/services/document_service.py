"""Document service for storing client document uploads in blob storage."""
import logging
import re
from uuid import uuid4

from src.sales.config import S3Settings
from src.sales.core.domain.models import DOCUMENT_FIELDS, DocumentUpload
from src.shared.blob_storage.s3_blober import S3BlobStorage
from src.shared.exceptions import InvalidDocument

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: str) -> str:
    """Reduce a client supplied file name to characters that are safe in an object key."""
    base_name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", base_name).strip("._")
    return cleaned or "document"


class DocumentService:
    """Service for validating and uploading client documents."""

    def __init__(self, blob_storage: S3BlobStorage, settings: S3Settings):
        """
        Initialize the document service.

        Args:
            blob_storage: S3 blob storage for file operations
            settings: Key pattern, size limit and accepted content types
        """
        self.blob_storage = blob_storage
        self.settings = settings

    def select_uploads(self, uploads: list[DocumentUpload]) -> list[DocumentUpload]:
        """
        Keep uploads addressed to known document fields and validate them.

        Uploads for unknown fields are ignored. Empty uploads (a form field sent
        without a file) are dropped.

        Raises:
            InvalidDocument: If a file has an unsupported content type or is too large
        """
        selected = []
        for upload in uploads:
            if upload.field_name not in DOCUMENT_FIELDS:
                logger.warning("Ignoring upload for unknown document field '%s'", upload.field_name)
                continue
            if upload.size == 0:
                continue
            if upload.content_type not in self.settings.allowed_content_types:
                raise InvalidDocument(upload.field_name, f"unsupported file type {upload.content_type}")
            if upload.size > self.settings.max_upload_bytes:
                raise InvalidDocument(
                    upload.field_name,
                    f"file exceeds the {self.settings.max_upload_bytes} byte limit",
                )
            selected.append(upload)
        return selected

    def document_key(self, client_id: str, upload: DocumentUpload) -> str:
        return self.settings.document_key_pattern.format(
            client_id=client_id,
            field_name=upload.field_name,
            upload_id=uuid4().hex,
            filename=safe_filename(upload.filename),
        )

    async def upload_documents(self, client_id: str, uploads: list[DocumentUpload]) -> dict[str, str]:
        """
        Upload each document for a client and collect the resulting URLs.

        Uploads are independent: a failed upload is logged and skipped, and the
        remaining documents are still stored.

        Args:
            client_id: ID of the client the documents belong to
            uploads: Validated uploads, see select_uploads

        Returns:
            Mapping of document field name to the URL of the stored file
        """
        document_urls: dict[str, str] = {}
        for upload in uploads:
            key = self.document_key(client_id, upload)
            try:
                document_urls[upload.field_name] = await self.blob_storage.upload_bytes(
                    key, upload.content, upload.content_type
                )
            except RuntimeError as e:
                logger.error(f"Upload of '{upload.field_name}' failed for client {client_id}: {e}")
                continue
            logger.info("Uploaded '%s' for client %s to %s", upload.field_name, client_id, key)

        return document_urls
