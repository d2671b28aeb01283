# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Sauce images are uploaded by the browser to "pending/<uuid>.<ext>" before
# the supplier form is submitted. Once the sauce exists, the image is moved
# to its permanent path "<supplier_id>/<sauce_id>.<ext>".
# =============================================================================

import logging
import posixpath

from lib.supabase_client import SupabaseClient
from app.config import settings
from app.exceptions import StorageMoveError

logger = logging.getLogger(__name__)

PENDING_PREFIX = "pending/"


class StorageService:
    """
    Service for Supabase Storage operations.

    Handles moving uploaded sauce images into place.
    """

    @staticmethod
    def is_pending_path(path: str | None) -> bool:
        """True if the path is a temporary upload that still needs moving."""
        return bool(path) and path.startswith(PENDING_PREFIX)

    @staticmethod
    def final_image_path(supplier_id: str, sauce_id: str, source_path: str) -> str:
        """
        Build the permanent image path, keeping the upload's extension.

        Example:
            final_image_path("sup-1", "sauce-9", "pending/abc.webp")
            # "sup-1/sauce-9.webp"
        """
        extension = posixpath.splitext(source_path)[1].lstrip(".").lower() or "jpg"
        return f"{supplier_id}/{sauce_id}.{extension}"

    @staticmethod
    def move_sauce_image(
        supplier_id: str,
        sauce_id: str,
        source_path: str,
    ) -> str:
        """
        Move a pending upload to its permanent path.

        Paths that aren't pending uploads are returned unchanged.

        Args:
            supplier_id: Owning supplier UUID
            sauce_id: Sauce UUID
            source_path: Current storage path

        Returns:
            Storage path the image now lives at

        Raises:
            StorageMoveError: If the storage API rejects the move
        """
        if not StorageService.is_pending_path(source_path):
            return source_path

        client = SupabaseClient.get_client()
        destination = StorageService.final_image_path(supplier_id, sauce_id, source_path)

        try:
            client.storage.from_(settings.SAUCE_IMAGE_BUCKET).move(source_path, destination)
        except Exception as e:
            logger.error(f"Storage move failed for {source_path}: {e}")
            raise StorageMoveError(source_path, str(e))

        logger.info(f"Moved sauce image: {source_path} -> {destination}")
        return destination
