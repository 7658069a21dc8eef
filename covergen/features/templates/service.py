# covergen/features/templates/service.py
from typing import Dict, List, Optional

from .schemas import FontSize, StyleTemplate

_SANS = "PingFang SC, Microsoft YaHei, sans-serif"
_SERIF = "PingFang SC, Microsoft YaHei, serif"


def _t(id, name, description, bg, text, accent, font, title, subtitle, category) -> StyleTemplate:
    return StyleTemplate(
        id=id,
        name=name,
        description=description,
        preview=f"/templates/{id}.png",
        background_color=bg,
        text_color=text,
        accent_color=accent,
        font_family=font,
        font_size=FontSize(title=title, subtitle=subtitle),
        layout="center",
        category=category,
    )


STYLE_TEMPLATES: List[StyleTemplate] = [
    _t("minimal-clean", "Minimal Clean", "Minimal design that lets the content speak", "#FFFFFF", "#333333", "#4A90E2", _SANS, 48, 32, "minimal"),
    _t("modern-bold", "Modern Bold", "High contrast with strong visual impact", "#000000", "#FFFFFF", "#FF6B6B", _SANS, 56, 36, "bold"),
    _t("elegant-gold", "Elegant Gold", "Premium texture, understated luxury", "#2C3E50", "#ECF0F1", "#F1C40F", _SERIF, 52, 34, "elegant"),
    _t("nature-fresh", "Nature Fresh", "Green, natural and calm", "#E8F5E9", "#2E7D32", "#81C784", _SANS, 46, 30, "nature"),
    _t("tech-blue", "Tech Blue", "Technical, professional and trustworthy", "#0F2027", "#FFFFFF", "#4FC3F7", _SANS, 50, 32, "minimal"),
    _t("warm-pink", "Warm Pink", "Sweet and approachable", "#FFF0F5", "#D81B60", "#FF4081", _SANS, 44, 28, "elegant"),
    _t("vintage-brown", "Vintage Brown", "Retro and nostalgic", "#3E2723", "#D7CCC8", "#A1887F", _SERIF, 48, 32, "elegant"),
    _t("gradient-purple", "Gradient Purple", "Dreamy gradients, fashion forward", "#6A1B9A", "#FFFFFF", "#CE93D8", _SANS, 54, 35, "bold"),
    _t("business-gray", "Business Gray", "Corporate, steady and composed", "#37474F", "#ECEFF1", "#78909C", _SANS, 50, 32, "minimal"),
    _t("artistic-multi", "Artistic Multicolor", "Colorful and creative", "#FFFFFF", "#212121", "#FF5722", _SANS, 56, 36, "bold"),
]

_BY_ID: Dict[str, StyleTemplate] = {t.id: t for t in STYLE_TEMPLATES}


def get_style_template(template_id: str) -> Optional[StyleTemplate]:
    return _BY_ID.get(template_id)


def list_style_templates(category: Optional[str] = None) -> List[StyleTemplate]:
    if not category:
        return list(STYLE_TEMPLATES)
    return [t for t in STYLE_TEMPLATES if t.category == category]
