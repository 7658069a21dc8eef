# covergen/features/visual_styles/service.py
from typing import List, Optional

from .schemas import VisualStyle, VisualStylePublic

VISUAL_STYLES: List[VisualStyle] = [
    VisualStyle(
        id="realistic-product",
        name="Product Photography",
        description="Realistic product showcase for e-commerce and reviews",
        preview="/visual-styles/realistic-product.png",
        category="realistic",
        prompt_fragment=(
            "realistic product photography style, professional studio lighting, clean gradient background, "
            "sharp focus on details, commercial photography aesthetic"
        ),
        is_recommended=True,
        sort_order=1,
    ),
    VisualStyle(
        id="realistic-food",
        name="Food Photography",
        description="Appetizing food shots for recipes and dining posts",
        preview="/visual-styles/realistic-food.png",
        category="realistic",
        prompt_fragment=(
            "professional food photography, appetizing presentation, warm lighting, shallow depth of field, "
            "culinary art aesthetic"
        ),
        sort_order=2,
    ),
    VisualStyle(
        id="illustration-flat",
        name="Flat Illustration",
        description="Modern flat design for tech and education content",
        preview="/visual-styles/illustration-flat.png",
        category="illustration",
        prompt_fragment=(
            "modern flat illustration style, geometric shapes, clean lines, limited color palette, "
            "vector art aesthetic, 2D design"
        ),
        sort_order=10,
    ),
    VisualStyle(
        id="illustration-watercolor",
        name="Watercolor",
        description="Soft hand-painted texture for lifestyle and emotional content",
        preview="/visual-styles/illustration-watercolor.png",
        category="illustration",
        prompt_fragment=(
            "watercolor illustration style, soft brush strokes, pastel colors, artistic hand-painted texture, "
            "gentle gradients"
        ),
        sort_order=11,
    ),
    VisualStyle(
        id="manga-anime",
        name="Anime",
        description="Japanese anime look for ACG content",
        preview="/visual-styles/manga-anime.png",
        category="manga",
        prompt_fragment=(
            "Japanese anime illustration style, vibrant colors, cel-shaded rendering, expressive design, "
            "dynamic composition, anime aesthetic"
        ),
        is_recommended=True,
        sort_order=20,
    ),
    VisualStyle(
        id="abstract-gradient",
        name="Gradient Geometry",
        description="Gradients and geometric shapes for tech and creative content",
        preview="/visual-styles/abstract-gradient.png",
        category="abstract",
        prompt_fragment=(
            "modern gradient design, geometric abstract shapes, vibrant color transitions, "
            "contemporary digital art style"
        ),
        sort_order=30,
    ),
]


def get_visual_style(style_id: str) -> Optional[VisualStyle]:
    for s in VISUAL_STYLES:
        if s.id == style_id:
            return s
    return None


def list_visual_styles(category: Optional[str] = None) -> List[VisualStylePublic]:
    styles = [s for s in VISUAL_STYLES if not category or s.category == category]
    styles.sort(key=lambda s: s.sort_order)
    return [VisualStylePublic(**s.model_dump(exclude={"prompt_fragment"})) for s in styles]
