from core.schemas import BaseDTO


class UploadedFileDTO(BaseDTO):
    url: str
    filename: str
    original_name: str | None
    size: int
    mime_type: str
