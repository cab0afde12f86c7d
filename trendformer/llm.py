"""Claude JSON completions for ranking and thread generation."""

import json

import anthropic

from .config import get_anthropic_key, get_claude_model
from .retry import with_retry

# Worth one more try; 4xx request errors are not
TRANSIENT_ERRORS = (
    anthropic.APIConnectionError,
    anthropic.RateLimitError,
    anthropic.InternalServerError,
)


class MissingConfigError(RuntimeError):
    """A required credential or setting is not configured."""


def get_anthropic_client():
    """Create an Anthropic client; raises MissingConfigError without a key."""
    api_key = get_anthropic_key()
    if not api_key:
        raise MissingConfigError("Missing ANTHROPIC_API_KEY")
    return anthropic.Anthropic(api_key=api_key)


@with_retry(max_retries=1, base_delay=2.0, exceptions=TRANSIENT_ERRORS)
def _call_claude(system: str, prompt: str, max_tokens: int, temperature: float) -> str:
    client = get_anthropic_client()
    msg = client.messages.create(
        model=get_claude_model(),
        max_tokens=max_tokens,
        temperature=temperature,
        system=system,
        messages=[{"role": "user", "content": prompt}],
    )
    return msg.content[0].text.strip()


def strip_code_fence(raw: str) -> str:
    """Remove a ```json ... ``` wrapper if the model added one."""
    raw = raw.strip()
    if raw.startswith("```"):
        raw = raw.split("```")[1]
        if raw.startswith("json"):
            raw = raw[4:]
        raw = raw.strip()
    return raw


def complete_json(system: str, prompt: str, max_tokens: int = 1500, temperature: float = 0.7) -> dict:
    """Ask Claude for a JSON object and parse it.

    Raises MissingConfigError before any call when no key is configured,
    and ValueError when the reply is not a JSON object.
    """
    if not get_anthropic_key():
        raise MissingConfigError("Missing ANTHROPIC_API_KEY")

    raw = strip_code_fence(_call_claude(system, prompt, max_tokens, temperature))
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data
