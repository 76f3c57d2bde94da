from fastapi import APIRouter, Depends, File, UploadFile, status

from persona_chat.api.dto import ImageUploadOut
from persona_chat.domain.models import ImageUpload
from persona_chat.infra.service import get_image_service
from persona_chat.services.image_service import ImageService

router = APIRouter(prefix='/image', tags=['image'])


@router.post('/upload', response_model=ImageUploadOut)
async def upload_image(
    file: UploadFile = File(...),
    service: ImageService = Depends(get_image_service),
):
    """Store a persona or profile picture; the returned URL is relative."""
    upload = ImageUpload(
        file_name=file.filename or '',
        content_type=file.content_type or '',
        content=await file.read(),
    )
    stored = await service.upload_image(upload)
    return ImageUploadOut(url=stored.url)


@router.delete('/{file_name}', status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(file_name: str, service: ImageService = Depends(get_image_service)):
    await service.delete_image(file_name)
