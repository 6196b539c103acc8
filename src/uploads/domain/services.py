from pathlib import Path

from fastapi import UploadFile

from core.logging import AbstractLogger
from core.services.base import BaseService
from core.services.exceptions import FileTooLargeError, UnsupportedFileError
from core.utils import save_upload_file
from uploads.schemas import UploadedFileDTO

ALLOWED_IMAGE_MIME_TYPES = frozenset(
    ["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"]
)


class UploadsService(BaseService):
    entity_name = "File"

    def __init__(
        self,
        logger: AbstractLogger,
        upload_dir: Path,
        max_file_size: int,
        media_url_prefix: str = "/media",
    ):
        super().__init__(logger)
        self._upload_dir = upload_dir
        self._max_file_size = max_file_size
        self._media_url_prefix = media_url_prefix

    async def upload_image(self, file: UploadFile) -> UploadedFileDTO:
        mime_type = (file.content_type or "").lower()
        if mime_type not in ALLOWED_IMAGE_MIME_TYPES:
            self._logger.warning(
                "Rejected upload", mime_type=mime_type, filename=file.filename
            )
            await file.close()
            raise UnsupportedFileError()
        if file.size is not None and file.size > self._max_file_size:
            await file.close()
            raise FileTooLargeError(self._max_file_size)
        filename, size = await save_upload_file(
            file, self._upload_dir, self._max_file_size
        )
        self._logger.info("File uploaded", filename=filename, size=size)
        return UploadedFileDTO(
            url=f"{self._media_url_prefix}/{filename}",
            filename=filename,
            original_name=file.filename,
            size=size,
            mime_type=mime_type,
        )
