# covergen/features/platforms/service.py
from typing import Dict, List, Optional

from .schemas import Dimensions, Platform

_MB = 1024 * 1024


def _p(id, name, description, ratio, w, h, max_mb, formats, category) -> Platform:
    return Platform(
        id=id,
        name=name,
        description=description,
        aspect_ratio=ratio,
        dimensions=Dimensions(width=w, height=h),
        max_file_size=max_mb * _MB,
        supported_formats=formats,
        category=category,
    )


PLATFORMS: List[Platform] = [
    _p("xiaohongshu", "Xiaohongshu", "Vertical note cover", "3:4", 1080, 1440, 10, ["jpg", "jpeg", "png", "webp"], "social"),
    _p("wechat", "WeChat Official Account", "Article cover", "16:9", 900, 500, 5, ["jpg", "jpeg", "png", "gif"], "content"),
    _p("wechat-banner", "WeChat Header", "Article header banner", "2.35:1", 900, 383, 5, ["jpg", "jpeg", "png"], "content"),
    _p("taobao", "Taobao / Tmall", "Square product image", "1:1", 800, 800, 3, ["jpg", "jpeg", "png"], "ecommerce"),
    _p("taobao-banner", "Taobao Banner", "Landscape shop banner", "3:2", 1200, 800, 3, ["jpg", "jpeg", "png"], "ecommerce"),
    _p("douyin", "Douyin", "Vertical video cover", "9:16", 720, 1280, 10, ["jpg", "jpeg", "png", "webp"], "social"),
    _p("weibo", "Weibo", "Post cover", "16:9", 1000, 562, 5, ["jpg", "jpeg", "png", "gif", "webp"], "social"),
    _p("bilibili", "Bilibili", "Video cover", "16:9", 1920, 1080, 6, ["jpg", "jpeg", "png"], "content"),
    _p("zhihu", "Zhihu", "Article cover", "16:9", 738, 415, 5, ["jpg", "jpeg", "png"], "content"),
]

_BY_ID: Dict[str, Platform] = {p.id: p for p in PLATFORMS}

# fastest first
_GENERATION_ORDER = {
    "xiaohongshu": 1,
    "wechat-banner": 2,
    "taobao": 3,
    "zhihu": 4,
    "weibo": 5,
    "wechat": 6,
    "bilibili": 7,
    "douyin": 8,
    "taobao-banner": 10,
}


def get_platform(platform_id: str) -> Optional[Platform]:
    return _BY_ID.get(platform_id)


def list_platforms(category: Optional[str] = None) -> List[Platform]:
    if not category:
        return list(PLATFORMS)
    return [p for p in PLATFORMS if p.category == category]


def _ratio(aspect_ratio: str) -> float:
    w, h = aspect_ratio.split(":")
    return float(w) / float(h)


def validate_platform_dimensions(platform_id: str, width: int, height: int) -> bool:
    platform = get_platform(platform_id)
    if platform is None or height <= 0:
        return False
    return abs(width / height - _ratio(platform.aspect_ratio)) < 0.01


def get_platform_generation_order(platform_ids: List[str]) -> List[str]:
    return sorted(platform_ids, key=lambda pid: _GENERATION_ORDER.get(pid, 999))


def validate_multi_platform_request(text: str, platforms: List[str]) -> List[str]:
    errors: List[str] = []
    if not platforms:
        errors.append("At least one platform must be specified")
    if len(platforms) > 10:
        errors.append("Cannot generate for more than 10 platforms at once")
    if len(set(platforms)) != len(platforms):
        errors.append("Duplicate platforms specified")
    for pid in platforms:
        if get_platform(pid) is None:
            errors.append(f"Platform {pid} is not supported")
    if len(text) < 10:
        errors.append("Text must be at least 10 characters long")
    if len(text) > 10000:
        errors.append("Text cannot exceed 10000 characters")
    return errors
