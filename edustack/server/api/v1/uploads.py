"""
Upload Endpoints.

Authenticated multipart uploads of images and videos to local media
storage. Each file is limited in size and must be an image or a video.
"""

from typing import List, Optional

from fastapi import APIRouter, File, UploadFile

from edustack.core.errors import BadRequestError
from edustack.core.models.io import ApiResponse, UploadedFile, UploadedFiles
from edustack.server.core.config import settings
from edustack.server.services.deps import CurrentUser, MediaStorageDep

router = APIRouter()


@router.post(
    "/image",
    response_model=ApiResponse[UploadedFile],
    summary="Upload Image",
    description="Upload one image in the multipart field `image`.",
    responses={400: {"description": "Missing, oversized or non-media file"}},
)
async def upload_image(
    user: CurrentUser, storage: MediaStorageDep, image: Optional[UploadFile] = File(None)
) -> ApiResponse[UploadedFile]:
    stored = await storage.save(image, "images")
    return ApiResponse[UploadedFile](message="Image uploaded successfully", data=stored)


@router.post(
    "/video",
    response_model=ApiResponse[UploadedFile],
    summary="Upload Video",
    description="Upload one video in the multipart field `video`.",
    responses={400: {"description": "Missing, oversized or non-media file"}},
)
async def upload_video(
    user: CurrentUser, storage: MediaStorageDep, video: Optional[UploadFile] = File(None)
) -> ApiResponse[UploadedFile]:
    stored = await storage.save(video, "videos")
    return ApiResponse[UploadedFile](message="Video uploaded successfully", data=stored)


@router.post(
    "/multiple",
    response_model=ApiResponse[UploadedFiles],
    summary="Upload Several Files",
    description="Upload up to five images or videos in the repeated multipart field `files`.",
    responses={400: {"description": "No files, too many files, or an invalid file"}},
)
async def upload_multiple(
    user: CurrentUser, storage: MediaStorageDep, files: Optional[List[UploadFile]] = File(None)
) -> ApiResponse[UploadedFiles]:
    if not files:
        raise BadRequestError("No files uploaded")
    if len(files) > settings.uploads.max_files:
        raise BadRequestError(f"Too many files (limit {settings.uploads.max_files})")
    stored = [await storage.save(upload, "files") for upload in files]
    return ApiResponse[UploadedFiles](message="Files uploaded successfully", data=UploadedFiles(files=stored))
