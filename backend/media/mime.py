from urllib.parse import urlparse

VIDEO_MIME_TYPES = {
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "m4v": "video/mp4",
    "avi": "video/x-msvideo",
    "webm": "video/webm",
}

IMAGE_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "heic": "image/heic",
}

DEFAULT_VIDEO_MIME = "video/mp4"
DEFAULT_IMAGE_MIME = "image/jpeg"


def file_extension(url: str) -> str:
    path = urlparse(url).path
    filename = path.rsplit("/", 1)[-1]
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def video_mime_type(url: str) -> str:
    return VIDEO_MIME_TYPES.get(file_extension(url), DEFAULT_VIDEO_MIME)


def image_mime_type(url: str) -> str:
    return IMAGE_MIME_TYPES.get(file_extension(url), DEFAULT_IMAGE_MIME)
