# touristguide/utils/images.py
from typing import List, Optional
from urllib.parse import urlsplit


def api_origin(base_url: str) -> str:
    """http://host:5000/api -> http://host:5000"""
    parts = urlsplit(base_url)
    return f"{parts.scheme}://{parts.netloc}"


def resolve_image_url(image_path: Optional[str], base_url: str) -> Optional[str]:
    """Полные URL возвращаются как есть, относительные пути дополняются адресом сервера"""
    if not image_path:
        return None
    if image_path.startswith(("http://", "https://")):
        return image_path
    origin = api_origin(base_url)
    if not image_path.startswith("/"):
        image_path = "/" + image_path
    return origin + image_path


def resolve_image_urls(images: List[str], base_url: str) -> List[str]:
    return [url for url in (resolve_image_url(path, base_url) for path in images) if url]
