import os
import time
import logging
from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

TEXT_API_BASE_URL = os.getenv("TEXT_API_BASE_URL", "https://openrouter.ai/api/v1")
SUMMARY_MODEL = os.getenv("SUMMARY_MODEL", "meta-llama/llama-3.1-8b-instruct")
SUMMARY_TIMEOUT = float(os.getenv("SUMMARY_TIMEOUT", "20"))

DEFAULT_SYSTEM_PROMPT = "You are a creative developer assistant. Output JSON only."


_client: AsyncOpenAI | None = None


def get_text_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        _client = AsyncOpenAI(
            base_url=TEXT_API_BASE_URL,
            api_key=os.getenv("TEXT_API_KEY") or os.getenv("OPENROUTER_API_KEY", ""),
            timeout=SUMMARY_TIMEOUT,
            max_retries=1,
        )
    return _client


async def generate_text(
    prompt: str,
    system: str = DEFAULT_SYSTEM_PROMPT,
    max_tokens: int = 400,
) -> str:
    """Single chat completion; returns the raw reply text."""
    client = get_text_client()
    t0 = time.time()
    response = await client.chat.completions.create(
        model=SUMMARY_MODEL,
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ],
        max_tokens=max_tokens,
        temperature=0.4,
    )
    text = (response.choices[0].message.content or "").strip()
    logger.info(f"[text-gen] {SUMMARY_MODEL} replied in {time.time() - t0:.1f}s ({len(text)} chars)")
    return text
