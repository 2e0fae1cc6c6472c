import io
import logging

from PIL import Image, UnidentifiedImageError

log = logging.getLogger(__name__)


def compress_image(data: bytes, content_type: str) -> bytes:
    """Recompress an image in its own format, keeping whichever is smaller.

    Non-images and images Pillow cannot read come back unchanged.
    """
    if not content_type.startswith("image/"):
        return data
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = (img.format or "").upper()
            save_kwargs = {}
            if fmt == "JPEG":
                if img.mode in ("RGBA", "P"):
                    img = img.convert("RGB")
                save_kwargs = {"format": "JPEG", "quality": 85, "optimize": True, "progressive": True}
            elif fmt == "PNG":
                save_kwargs = {"format": "PNG", "optimize": True, "compress_level": 9}
            elif fmt == "WEBP":
                save_kwargs = {"format": "WEBP", "quality": 85, "method": 6}
            else:
                return data

            out = io.BytesIO()
            img.save(out, **save_kwargs)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        log.debug("Keeping original upload, compression failed: %s", e)
        return data

    compressed = out.getvalue()
    return compressed if len(compressed) < len(data) else data
