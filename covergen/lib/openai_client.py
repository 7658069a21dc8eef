# covergen/lib/openai_client.py
from openai import OpenAI
from covergen.config import config

client = OpenAI(api_key=config.openai_api_key)


def compatible_client(api_key: str, base_url: str) -> OpenAI:
    """Client for an OpenAI-compatible endpoint (proxies, regional providers)."""
    if base_url.rstrip("/") == "https://api.openai.com/v1" and api_key == config.openai_api_key:
        return client
    return OpenAI(api_key=api_key, base_url=base_url)
