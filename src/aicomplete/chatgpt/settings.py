"""Settings for the chat-completion completer.

Stored settings arrive as an untyped JSON blob that may be missing or
corrupt. ``decode()`` turns any such blob into a valid, immutable
``Settings`` value and falls back to ``DEFAULT_SETTINGS`` whenever the
blob is absent or fails validation. It never raises.

Edits are made with ``apply_edit()``, which returns a new value with one
field replaced; ``encode()`` turns a value back into a blob for storage.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import math
import re
from typing import Any

import pydantic

logger = logging.getLogger("aicomplete.chatgpt.settings")

Number = int | float

REQUIRED_FIELDS = ("system_prompt", "user_prompt")
FLOAT_FIELDS = ("temperature", "top_p", "presence_penalty", "frequency_penalty")
INT_FIELDS = ("prompt_length",)
NUMERIC_FIELDS = FLOAT_FIELDS + INT_FIELDS
SETTINGS_FIELDS = REQUIRED_FIELDS + NUMERIC_FIELDS


class Settings(pydantic.BaseModel):
    """Validated completion settings.

    Optional numeric fields are ``None`` when unset and are left out of
    the encoded blob entirely, so "unset" stays distinct from zero.
    """

    model_config = pydantic.ConfigDict(frozen=True, strict=True, extra="ignore")

    system_prompt: str
    user_prompt: str
    temperature: Number | None = None
    top_p: Number | None = None
    presence_penalty: Number | None = None
    frequency_penalty: Number | None = None
    # Characters of context taken on each side of the cursor
    prompt_length: Number | None = None


# Keep the two trailing spaces after <expression>: a Markdown hard break
DEFAULT_SYSTEM_PROMPT = """\
### IMPORTANT

Give a short completion based on the context. Complete in the language of what the user uses. Write only the completion and nothing else. Do not include the user's text in your message. Only include the completion.

多使用 \\n 进行段落换行。

### Optional

LaTeX格式标准（当需要写出符号或公式时）

行内公式：$<expression>$

块级公式 (一定要在第一列，不能有任何缩进) ：

$$
<expression>  
$$

Output result only."""

DEFAULT_USER_PROMPT = "Continue the following:\n\n{{prefix}}"

DEFAULT_SETTINGS = Settings(
    system_prompt=DEFAULT_SYSTEM_PROMPT,
    user_prompt=DEFAULT_USER_PROMPT,
)


@dataclasses.dataclass(frozen=True)
class DecodeResult:
    """Outcome of ``try_decode``: either ``settings`` or ``error`` is set."""

    settings: Settings | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.settings is not None


def try_decode(raw: str | None) -> DecodeResult:
    """Parse and validate *raw* without falling back.

    ``None`` means nothing has been stored yet and succeeds with the
    defaults. A stored ``null`` for a numeric field is rejected: blobs
    written by ``encode`` leave unset fields out instead.
    ``NaN``/``Infinity`` tokens are accepted, since ``encode`` writes them.
    """
    if raw is None:
        return DecodeResult(settings=DEFAULT_SETTINGS)
    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as exc:
        return DecodeResult(error=f"invalid JSON: {exc}")
    if isinstance(data, dict):
        nulls = [k for k in NUMERIC_FIELDS if k in data and data[k] is None]
        if nulls:
            return DecodeResult(error=f"null numeric fields: {', '.join(nulls)}")
    try:
        return DecodeResult(settings=Settings.model_validate(data))
    except pydantic.ValidationError as exc:
        return DecodeResult(error=f"invalid settings: {exc.error_count()} errors")


def decode(raw: str | None) -> Settings:
    """Return the settings stored in *raw*, or the defaults.

    Validation is all-or-nothing: one bad field discards the whole blob.
    Fields missing from a valid blob stay unset; nothing is backfilled.
    """
    result = try_decode(raw)
    if result.settings is None:
        logger.debug("Falling back to default settings (%s)", result.error)
        return DEFAULT_SETTINGS
    return result.settings


def encode(settings: Settings) -> str:
    """Serialize *settings* to a JSON blob, omitting unset fields."""
    return json.dumps(settings.model_dump(exclude_none=True))


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------

_FLOAT_PREFIX = re.compile(
    r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII
)
_INT_PREFIX = re.compile(r"[+-]?\d+", re.ASCII)


def parse_float(text: str) -> float:
    """Parse the longest numeric prefix of *text*, like ``parseFloat``.

    Leading whitespace is skipped and trailing garbage ignored; text with
    no numeric prefix gives NaN.
    """
    match = _FLOAT_PREFIX.match(text.lstrip())
    if match is None:
        return math.nan
    return float(match.group())


def parse_int(text: str) -> Number:
    """Parse leading decimal digits of *text*, like ``parseInt(text, 10)``."""
    match = _INT_PREFIX.match(text.lstrip())
    if match is None:
        return math.nan
    return int(match.group())


def _edit_value(field: str, value: Any) -> Any:
    if field in REQUIRED_FIELDS:
        if not isinstance(value, str):
            raise TypeError(f"{field} must be a string, got {type(value).__name__}")
        return value
    if isinstance(value, str):
        return parse_int(value) if field in INT_FIELDS else parse_float(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{field} must be a number, got {type(value).__name__}")
    return value


def apply_edit(settings: Settings, field: str, value: Any) -> Settings:
    """Return a copy of *settings* with *field* replaced by *value*.

    Text entered into a numeric field is parsed; text that is not a
    number becomes NaN and is kept as such.
    """
    if field not in SETTINGS_FIELDS:
        raise KeyError(f"Unknown setting: {field}")
    return settings.model_copy(update={field: _edit_value(field, value)})


def clear_field(settings: Settings, field: str) -> Settings:
    """Return a copy of *settings* with an optional field unset."""
    if field not in NUMERIC_FIELDS:
        raise KeyError(f"Cannot clear setting: {field}")
    return settings.model_copy(update={field: None})
