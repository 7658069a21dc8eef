# covergen/features/creative_director/service.py
from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from covergen.config import api_key_for, config
from covergen.features.platforms.schemas import Platform
from covergen.lib import openai_client
from covergen.logger import get_logger

from .prompt import (
    IMAGE_PROMPT_MARKER,
    SUMMARY_MARKER,
    TITLES_MARKER,
    build_director_prompt,
    build_fallback_image_prompt,
)
from .schemas import DirectorOutput, TitleSuggestion

log = get_logger(__name__)

MAX_RETRIES = 2

_TITLES_RE = re.compile(re.escape(TITLES_MARKER) + r"[ \t]*\n(.+?)(?=\n\[[A-Z ]+\]|\Z)", re.DOTALL)
_NUMBERED_RE = re.compile(r"^\d+\.\s*(.+)")


@dataclass(frozen=True)
class LLMProvider:
    id: str
    kind: str               # openai | gemini
    model: str
    api_key_env: str
    base_url: Optional[str] = None
    display_name: str = ""


# auto-selection order
LLM_PROVIDERS: List[LLMProvider] = [
    LLMProvider("volcengine_deepseek", "openai", "deepseek-v3-2", "VOLCENGINE_API_KEY",
                "https://ark.cn-beijing.volces.com/api/v3", "Volcengine DeepSeek"),
    LLMProvider("zhipu_glm", "openai", "glm-4-flash", "ZHIPUAI_API_KEY",
                "https://open.bigmodel.cn/api/paas/v4", "Zhipu GLM-4 Flash"),
    LLMProvider("gemini_flash", "gemini", "gemini-2.5-flash", "GOOGLE_AI_API_KEY", None, "Gemini Flash"),
    LLMProvider("openai", "openai", config.openai_text_model, "OPENAI_API_KEY",
                "https://api.openai.com/v1", "OpenAI"),
]


def select_provider(preferred: Optional[str] = None) -> LLMProvider:
    """LLM_PROVIDER wins when its key is set; otherwise the first provider with a key."""
    preferred = preferred if preferred is not None else config.llm_provider
    if preferred:
        for p in LLM_PROVIDERS:
            if p.id == preferred and api_key_for(p.api_key_env):
                return p
    for p in LLM_PROVIDERS:
        if api_key_for(p.api_key_env):
            return p
    # nothing configured: calls will fail and the fallback brief is used
    return LLM_PROVIDERS[-1]


def parse_titles(section: str) -> List[TitleSuggestion]:
    lines = [ln.strip() for ln in section.split("\n") if ln.strip()]
    out: List[TitleSuggestion] = []
    for index, line in enumerate(lines):
        m = _NUMBERED_RE.match(line)
        if m:
            out.append(TitleSuggestion(text=m.group(1).strip(), confidence=max(0.0, round(1 - index * 0.1, 2))))
    return out


def parse_output(response: str, user_content: str) -> List[TitleSuggestion]:
    m = _TITLES_RE.search(response.strip())
    if not m:
        return [TitleSuggestion(text=user_content[:20], confidence=0.5)]
    return parse_titles(m.group(1))


class CreativeDirector:
    def __init__(self, provider: Optional[LLMProvider] = None, sleep: Callable[[float], None] = time.sleep):
        self.provider = provider or select_provider()
        self._sleep = sleep
        log.info(f"creative director using {self.provider.display_name or self.provider.id} ({self.provider.model})")

    def analyze(self, *, user_content: str, platform: Platform, visual_style_prompt: Optional[str] = None) -> DirectorOutput:
        """
        Summary, titles and image prompt for one platform in a single LLM call.
        Never raises: any failure yields the generic fallback brief.
        """
        log.info(
            f"creative analysis for {platform.id}: {len(user_content)} chars, "
            f"visual style {'set' if visual_style_prompt else 'auto'}"
        )
        try:
            prompt = build_director_prompt(
                user_content=user_content,
                platform_name=platform.name,
                width=platform.dimensions.width,
                height=platform.dimensions.height,
                visual_style=visual_style_prompt,
            )
            raw = self.call_llm(prompt)
            if not raw:
                raise ValueError("empty LLM response")
            full_text = raw.strip()
            titles = parse_output(full_text, user_content)
            log.info(f"creative analysis done: {len(titles)} titles, {len(full_text)} chars")
            return DirectorOutput(full_text=full_text, title_suggestions=titles, provider=self.provider.id)
        except Exception as e:
            log.error(f"creative analysis failed, using fallback brief: {e}")
            return self.fallback_output(user_content=user_content, platform=platform, visual_style_prompt=visual_style_prompt)

    def call_llm(self, prompt: str) -> str:
        api_key = api_key_for(self.provider.api_key_env)
        if not api_key:
            raise RuntimeError(f"{self.provider.api_key_env} is not configured")

        for attempt in range(MAX_RETRIES + 1):
            try:
                if self.provider.kind == "gemini":
                    return self._call_gemini(api_key, prompt)
                return self._call_openai(api_key, prompt)
            except Exception as e:
                if attempt == MAX_RETRIES:
                    raise
                delay = 2 ** attempt
                log.warning(f"LLM call failed (attempt {attempt + 1}), retrying in {delay}s: {e}")
                self._sleep(delay)
        raise RuntimeError("LLM call failed")

    def _call_openai(self, api_key: str, prompt: str) -> str:
        client = openai_client.compatible_client(api_key, self.provider.base_url or "https://api.openai.com/v1")
        resp = client.chat.completions.create(
            model=self.provider.model,
            temperature=0.7,
            max_tokens=2048,
            messages=[
                {"role": "system", "content": "You write concise, platform-native social media cover briefs."},
                {"role": "user", "content": prompt},
            ],
        )
        return (resp.choices[0].message.content or "").strip()

    def _call_gemini(self, api_key: str, prompt: str) -> str:
        from google import genai
        from google.genai import types

        client = genai.Client(api_key=api_key)
        resp = client.models.generate_content(
            model=self.provider.model,
            contents=prompt,
            config=types.GenerateContentConfig(temperature=0.7, max_output_tokens=2048),
        )
        return (getattr(resp, "text", "") or "").strip()

    def fallback_output(self, *, user_content: str, platform: Platform, visual_style_prompt: Optional[str] = None) -> DirectorOutput:
        preview = user_content[:30]
        image_prompt = build_fallback_image_prompt(
            platform_name=platform.name,
            width=platform.dimensions.width,
            height=platform.dimensions.height,
            visual_style=visual_style_prompt,
        )
        full_text = (
            f"{SUMMARY_MARKER}\n{preview}\n\n"
            f"{TITLES_MARKER}\n1. {preview}\n\n"
            f"{IMAGE_PROMPT_MARKER}\n{image_prompt}"
        )
        return DirectorOutput(
            full_text=full_text,
            title_suggestions=[TitleSuggestion(text=preview, confidence=0.5)],
            provider=self.provider.id,
            fallback=True,
        )


_instance: Optional[CreativeDirector] = None


def get_creative_director() -> CreativeDirector:
    global _instance
    if _instance is None:
        _instance = CreativeDirector()
    return _instance


def reset_creative_director() -> None:
    global _instance
    _instance = None
