# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
import dataclasses
from typing import Any, Literal, Optional

# Maps DOM `KeyboardEvent.key` values to deck commands.
# Digit keys are handled separately and select a chapter by id.
KEY_COMMANDS = {
    "ArrowRight": "next",
    "ArrowDown": "next",
    " ": "next",
    "ArrowLeft": "previous",
    "ArrowUp": "previous",
    "PageDown": "next_chapter",
    "PageUp": "previous_chapter",
    "Home": "first",
    "End": "last",
    "s": "toggle_sidebar",
    "S": "toggle_sidebar",
    "v": "toggle_narration",
    "V": "toggle_narration",
}

# Typing into these elements never navigates.
TEXT_ENTRY_TAGS = frozenset({"INPUT", "TEXTAREA"})
INTERACTIVE_TAGS = frozenset({"A", "BUTTON"})

Command = tuple[str, Optional[int]]


@dataclasses.dataclass(frozen=True, slots=True)
class InputEvent:
    """A DOM event forwarded from the deck page."""

    kind: Literal["key", "slide_click", "chapter_click", "sidebar_click"]
    key: str = ""
    ctrl: bool = False
    meta: bool = False
    target_tag: str = ""
    # True when the click target is inside a link or button.
    interactive: bool = False
    chapter: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "InputEvent":
        chapter = payload.get("chapter")
        try:
            chapter = int(chapter) if chapter not in (None, "") else None
        except (TypeError, ValueError):
            chapter = None
        return cls(
            kind=payload.get("kind", "key"),
            key=str(payload.get("key") or ""),
            ctrl=bool(payload.get("ctrl")),
            meta=bool(payload.get("meta")),
            target_tag=str(payload.get("targetTag") or "").upper(),
            interactive=bool(payload.get("interactive")),
            chapter=chapter,
        )


def resolve_command(event: InputEvent) -> Optional[Command]:
    """Turns an input event into a `(command, argument)` pair, or None."""
    if event.kind == "chapter_click":
        if event.chapter is None:
            return None
        return ("go_to_chapter", event.chapter)

    if event.kind == "sidebar_click":
        return ("toggle_sidebar", None)

    if event.kind == "slide_click":
        if event.interactive or event.target_tag in INTERACTIVE_TAGS:
            return None
        return ("next", None)

    if event.target_tag in TEXT_ENTRY_TAGS:
        return None
    command = KEY_COMMANDS.get(event.key)
    if command:
        return (command, None)
    if len(event.key) == 1 and event.key in "123456789":
        if event.ctrl or event.meta:
            return None
        return ("go_to_chapter", int(event.key))
    return None


def parse_slide_fragment(fragment: Optional[str], total_slides: int) -> Optional[int]:
    """Parses a `#12` style deep link. Returns None unless it names a real slide."""
    if not fragment:
        return None
    text = fragment.lstrip("#").strip()
    # isdigit() alone accepts superscripts and other digits int() rejects.
    if not (text.isascii() and text.isdigit()):
        return None
    slide = int(text)
    if slide < 1 or slide > total_slides:
        return None
    return slide
