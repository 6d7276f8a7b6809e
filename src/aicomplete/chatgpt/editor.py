"""Editing surface contract for completer settings.

The form itself is declarative: ``FIELDS`` lists what to render. Every
edit goes through ``SettingsEditor.on_edit``, which re-reads the stored
blob, replaces one field and hands the re-encoded blob to ``save``.
"""

from __future__ import annotations

import dataclasses
import math
from typing import TYPE_CHECKING, Any

import aicomplete.chatgpt.settings

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclasses.dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: str  # "text", "float" or "int"
    description: str = ""


FIELDS = (
    FieldSpec("system_prompt", "System prompt", "text"),
    FieldSpec("user_prompt", "User prompt", "text"),
    FieldSpec("temperature", "Temperature", "float"),
    FieldSpec("top_p", "Top P", "float"),
    FieldSpec("presence_penalty", "Presence penalty", "float"),
    FieldSpec("frequency_penalty", "Frequency penalty", "float"),
    FieldSpec(
        "prompt_length",
        "Prompt length",
        "int",
        "The length of both the prefix and the suffix of the prompt, in characters.",
    ),
)

RATE_LIMIT_NOTE = (
    "If you're getting rate limit errors, there is not much to be done here: "
    "the API provider limits heavy use. Either upgrade your plan or set up a "
    "fallback preset, which is used while waiting for the rate limit to reset."
)


def field_spec(name: str) -> FieldSpec:
    for spec in FIELDS:
        if spec.name == name:
            return spec
    raise KeyError(f"Unknown setting: {name}")


def format_value(value: Any) -> str:
    """Render a field value the way a form input shows it."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


class SettingsEditor:
    """Bind decode/edit/encode to a ``load``/``save`` callback pair."""

    def __init__(
        self,
        load: Callable[[], str | None],
        save: Callable[[str], None],
    ) -> None:
        self._load = load
        self._save = save

    @property
    def settings(self) -> aicomplete.chatgpt.settings.Settings:
        return aicomplete.chatgpt.settings.decode(self._load())

    def display_value(self, field: str) -> str:
        field_spec(field)
        return format_value(getattr(self.settings, field))

    def on_edit(self, field: str, value: Any) -> aicomplete.chatgpt.settings.Settings:
        """Apply one field edit and save the resulting blob."""
        updated = aicomplete.chatgpt.settings.apply_edit(self.settings, field, value)
        self._save(aicomplete.chatgpt.settings.encode(updated))
        return updated

    def on_clear(self, field: str) -> aicomplete.chatgpt.settings.Settings:
        updated = aicomplete.chatgpt.settings.clear_field(self.settings, field)
        self._save(aicomplete.chatgpt.settings.encode(updated))
        return updated

    def reset(self) -> aicomplete.chatgpt.settings.Settings:
        defaults = aicomplete.chatgpt.settings.DEFAULT_SETTINGS
        self._save(aicomplete.chatgpt.settings.encode(defaults))
        return defaults
