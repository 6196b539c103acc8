from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse
from config import Config
from core.ioc import Resolve
from cart.handlers import router as cart_router
from uploads.handlers import router as uploads_router

major_version = Resolve(Config).api_version[0]

api_router = APIRouter(prefix=f"/api/v{major_version}", tags=[f"api_v{major_version}"])

api_router.include_router(cart_router)
api_router.include_router(uploads_router)

router = APIRouter()
router.include_router(api_router)


@router.get("/ping")
async def ping() -> dict[str, str]:
    return {"status": "available", "version": Resolve(Config).api_version}


@router.get("/media/{filename}")
async def media_serve(filename: str):
    upload_dir = Resolve(Config).uploads.dir
    file_path = upload_dir / filename
    if file_path.name != filename or not file_path.is_file():
        raise HTTPException(
            status.HTTP_404_NOT_FOUND, f"File {filename} does not exist"
        )
    return FileResponse(file_path)
