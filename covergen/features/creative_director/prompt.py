# covergen/features/creative_director/prompt.py
SUMMARY_MARKER = "[CONTENT SUMMARY]"
TITLES_MARKER = "[TITLE SUGGESTIONS]"
IMAGE_PROMPT_MARKER = "[IMAGE PROMPT]"
STYLE_PLACEHOLDER = "[STYLE_PLACEHOLDER]"


def build_director_prompt(
    *,
    user_content: str,
    platform_name: str,
    width: int,
    height: int,
    visual_style: str | None = None,
) -> str:
    """
    One prompt that replaces three calls: content analysis, title writing and
    the image-prompt design. Output is plain text split by section markers so
    a truncated answer still yields usable parts.
    """
    style_line = visual_style or "decide a suitable visual style from the content"
    return f"""You are a world-class social media cover designer and copywriter.
Analyze the input below and produce a cover brief.

# Input
Target platform: {platform_name} ({width}x{height})
Visual style: {style_line}
User content:
{user_content}

# Output format
Reply in plain text exactly in this layout (no JSON, no markdown code fences):

{SUMMARY_MARKER}
One or two sentences summarizing the core message (at most 20 words).

{TITLES_MARKER}
1. First title (with an emoji, matching {platform_name} conventions)
2. Second title (with an emoji)
3. Third title (with an emoji)

{IMAGE_PROMPT_MARKER}
A complete English text-to-image prompt of 100-200 words describing subject,
composition, lighting, palette and typography area for a {width}x{height} cover.
Write {STYLE_PLACEHOLDER} where the visual style description belongs.

Output only the plain text above and nothing else."""


def build_fallback_image_prompt(*, platform_name: str, width: int, height: int, visual_style: str | None = None) -> str:
    text = (
        f"Professional social media cover image for {platform_name}. "
        f"Clean modern design with bold typography. Suitable for {width}x{height} pixels. "
        "High quality, professional aesthetic."
    )
    if visual_style:
        text += f" {visual_style}"
    return text
