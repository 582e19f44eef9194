"""Media type detection for image assets."""

# Media type -> file extension used inside the archive
IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}

DEFAULT_IMAGE_MEDIA_TYPE = "image/jpeg"


def sniff_media_type(data: bytes) -> str | None:
    """Infer an image media type from its leading bytes."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    head = data[:256].lstrip()
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in data[:1024]):
        return "image/svg+xml"
    return None


def extension_for_media_type(media_type: str) -> str:
    """Return the archive file extension for an image media type.

    Unknown types fall back to the subtype ("image/avif" -> "avif").
    """
    media_type = media_type.split(";", 1)[0].strip().lower()
    if media_type in IMAGE_EXTENSIONS:
        return IMAGE_EXTENSIONS[media_type]
    subtype = media_type.rpartition("/")[2]
    return "".join(c for c in subtype if c.isalnum()) or "bin"
