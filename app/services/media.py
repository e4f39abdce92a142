import asyncio
import base64
from pathlib import Path

from app.core.errors import MediaEncodingError
from app.core.models import EncodedImage, ImageAttachment
from config.logger import logger
from config.settings import config

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def guess_mime_type(image_path: str) -> str:
    suffix = Path(image_path).suffix.lower()
    return MIME_TYPES.get(suffix, "image/jpeg")


def select_images(files: list | None, limit: int | None = None) -> list[ImageAttachment]:
    """Keeps the first `limit` selected files, in selection order.

    Accepts plain paths or Gradio file objects exposing `.name`.
    """
    limit = config.MAX_IMAGES if limit is None else limit
    attachments: list[ImageAttachment] = []
    for item in files or []:
        if isinstance(item, str):
            attachments.append(ImageAttachment(file_path=item))
        elif isinstance(item, ImageAttachment):
            attachments.append(item)
        elif hasattr(item, "name"):
            attachments.append(ImageAttachment(file_path=item.name))

    if len(attachments) > limit:
        logger.info(f"Dropping {len(attachments) - limit} image(s) beyond the limit of {limit}")
    return attachments[:limit]


def _read_bytes(image_path: str) -> bytes:
    with open(image_path, "rb") as image_file:
        return image_file.read()


async def encode_image(image: ImageAttachment) -> EncodedImage:
    # File reads run in the default executor so the event loop stays free
    loop = asyncio.get_running_loop()
    try:
        raw = await loop.run_in_executor(None, _read_bytes, image.file_path)
    except OSError as e:
        logger.error(f"Failed to read image {image.file_path}: {e}")
        raise MediaEncodingError(f"Could not read image file: {Path(image.file_path).name}") from e

    mime_type = image.mime_type or guess_mime_type(image.file_path)
    logger.info(f"Encoded image {image.file_path} ({mime_type}, {len(raw)} bytes)")
    return EncodedImage(mime_type=mime_type, data=base64.b64encode(raw).decode("utf-8"))


async def encode_images(images: list[ImageAttachment]) -> list[EncodedImage]:
    """Encodes all images concurrently; the output keeps the input order."""
    if not images:
        return []
    return list(await asyncio.gather(*(encode_image(img) for img in images)))
