# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles filing-proof uploads (receipts, stamped filings, confirmations)
# attached to compliance events, stored in Supabase Storage.
# =============================================================================

import logging
import mimetypes
from pathlib import PurePath

from lib.supabase_client import SupabaseClient
from app.config import settings
from app.exceptions import FileTooLargeError, InvalidFileTypeError, StorageUploadError

logger = logging.getLogger(__name__)

# Storage bucket name
BUCKET_NAME = "compliance-documents"


class StorageService:
    """
    Service for Supabase Storage operations.

    Documents live under businesses/{business_id}/events/{event_id}/.
    """

    @staticmethod
    def validate_document(filename: str, size_bytes: int) -> str:
        """
        Check an upload against the allowed extensions and size limit.

        Returns:
            The lower-cased file extension

        Raises:
            InvalidFileTypeError: Extension not in ALLOWED_DOCUMENT_EXTENSIONS
            FileTooLargeError: Larger than MAX_UPLOAD_SIZE_MB
        """
        allowed = settings.allowed_document_extensions_list
        extension = PurePath(filename or "").suffix.lower()
        if extension not in allowed:
            raise InvalidFileTypeError(filename or "", allowed)

        if size_bytes > settings.max_upload_size_bytes:
            raise FileTooLargeError(size_bytes / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)

        return extension

    @staticmethod
    def document_path(business_id: str | int, event_id: str | int, filename: str) -> str:
        safe_name = PurePath(filename).name.replace(" ", "_")
        return f"businesses/{business_id}/events/{event_id}/{safe_name}"

    @staticmethod
    def upload_document(
        business_id: str | int,
        event_id: str | int,
        filename: str,
        content: bytes,
    ) -> str:
        """
        Validate and upload a filing document.

        Args:
            business_id: Owning business
            event_id: Compliance event the document proves
            filename: Original filename
            content: File bytes

        Returns:
            Storage path where file was uploaded

        Raises:
            InvalidFileTypeError / FileTooLargeError: Validation failed
            StorageUploadError: If upload fails
        """
        StorageService.validate_document(filename, len(content))

        client = SupabaseClient.get_client()
        path = StorageService.document_path(business_id, event_id, filename)
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"

        try:
            client.storage.from_(BUCKET_NAME).upload(
                path=path,
                file=content,
                file_options={"content-type": content_type, "upsert": "true"}
            )

            logger.info(f"Uploaded document to storage: {path}")
            return path

        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e))

    @staticmethod
    def get_signed_url(storage_path: str, expires_in: int = 3600) -> str | None:
        """Temporary download URL for a stored document."""
        client = SupabaseClient.get_client()

        result = client.storage.from_(BUCKET_NAME).create_signed_url(storage_path, expires_in)
        return result.get("signedURL") or result.get("signedUrl")

    @staticmethod
    def delete_document(storage_path: str) -> bool:
        """
        Delete a document from storage.

        Returns:
            True if deleted successfully
        """
        client = SupabaseClient.get_client()

        try:
            client.storage.from_(BUCKET_NAME).remove([storage_path])
            logger.info(f"Deleted document from storage: {storage_path}")
            return True

        except Exception as e:
            logger.error(f"Failed to delete document: {e}")
            return False
