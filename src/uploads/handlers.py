import typing as t

from fastapi import APIRouter, File, UploadFile, status

from core.ioc import Inject
from uploads.domain.services import UploadsService
from uploads.schemas import UploadedFileDTO

router = APIRouter(prefix="/uploads", tags=["uploads"])

UploadsServiceDep = t.Annotated[UploadsService, Inject(UploadsService)]


@router.post("/image", status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: t.Annotated[UploadFile, File()], uploads_service: UploadsServiceDep
) -> UploadedFileDTO:
    return await uploads_service.upload_image(file)
