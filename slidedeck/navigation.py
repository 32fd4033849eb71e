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

"""
Slide and chapter navigation.

The NavigationController is the only writer of the current slide. Every
successful move is announced synchronously to subscribers as a
PositionChanged event that also says who caused it, so that observers such
as the narration controller can tell their own moves from the user's.
"""

import dataclasses
import enum
from typing import Any, Callable, Optional

import termcolor

from .config import Chapter, DeckConfig


class NavigationCause(str, enum.Enum):
    USER = "user"
    AUTO_ADVANCE = "auto-advance"


class SlideStatus(str, enum.Enum):
    """Per-slide classification used for transition styling."""

    ACTIVE = "active"
    SHOWN = "prev"
    UPCOMING = "upcoming"


@dataclasses.dataclass(frozen=True, slots=True)
class PositionChanged:
    position: int
    chapter: int
    cause: NavigationCause = NavigationCause.USER


PositionListener = Callable[[PositionChanged], None]
SidebarListener = Callable[[bool], None]


class NavigationController:
    """Owns the current slide, the derived chapter and sidebar visibility."""

    def __init__(
        self,
        deck: DeckConfig,
        *,
        start: int = 1,
        debug: bool = False,
        status_callback: Optional[Callable[[str], None]] = None,
    ) -> None:
        deck.validate()
        self._deck = deck
        self._debug = debug
        self._status_callback = status_callback or (
            lambda message: termcolor.cprint(message, color="cyan")
        )
        self._position = start if 1 <= start <= deck.total_slides else 1
        self._sidebar_visible = True
        self._statuses: tuple[SlideStatus, ...] = self._classify(self._position)
        self._listeners: list[PositionListener] = []
        self._sidebar_listeners: list[SidebarListener] = []

    def _debug_print(self, message: str) -> None:
        if self._debug:
            self._status_callback(f"[Navigation] {message}")

    @property
    def position(self) -> int:
        return self._position

    @property
    def total_slides(self) -> int:
        return self._deck.total_slides

    @property
    def chapters(self) -> tuple[Chapter, ...]:
        return self._deck.chapters

    @property
    def sidebar_visible(self) -> bool:
        return self._sidebar_visible

    @property
    def current_chapter(self) -> int:
        return self.chapter_for(self._position)

    @property
    def counter_text(self) -> str:
        return f"{self._position} / {self._deck.total_slides}"

    def chapter_for(self, slide: int) -> int:
        for chapter in self._deck.chapters:
            if chapter.contains(slide):
                return chapter.id
        # Unreachable for a validated deck.
        return self._deck.chapters[0].id

    def slide_status(self, slide: int) -> SlideStatus:
        return self._statuses[slide - 1]

    def slide_statuses(self) -> tuple[SlideStatus, ...]:
        return self._statuses

    def snapshot(self) -> dict[str, Any]:
        return {
            "current_slide": self._position,
            "total_slides": self._deck.total_slides,
            "current_chapter": self.current_chapter,
            "sidebar_visible": self._sidebar_visible,
        }

    def subscribe(self, listener: PositionListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def subscribe_sidebar(self, listener: SidebarListener) -> Callable[[], None]:
        self._sidebar_listeners.append(listener)
        return lambda: self._sidebar_listeners.remove(listener)

    def go_to(self, slide: Any, cause: NavigationCause = NavigationCause.USER) -> bool:
        """Moves to `slide`; returns False and changes nothing when out of range.

        Moving to the current slide is not skipped: the event is emitted again
        so that observers can re-render or restart narration for it.
        """
        if isinstance(slide, bool) or not isinstance(slide, int):
            self._debug_print(f"ignoring non-integer slide {slide!r}")
            return False
        if slide < 1 or slide > self._deck.total_slides:
            self._debug_print(
                f"ignoring slide {slide} outside 1..{self._deck.total_slides}"
            )
            return False

        self._position = slide
        self._statuses = self._classify(slide)
        event = PositionChanged(
            position=slide, chapter=self.chapter_for(slide), cause=cause
        )
        self._debug_print(
            f"slide {event.position} (chapter {event.chapter}, {cause.value})"
        )
        for listener in list(self._listeners):
            listener(event)
        return True

    def next(self, cause: NavigationCause = NavigationCause.USER) -> bool:
        return self.go_to(self._position + 1, cause)

    def previous(self, cause: NavigationCause = NavigationCause.USER) -> bool:
        return self.go_to(self._position - 1, cause)

    def first(self, cause: NavigationCause = NavigationCause.USER) -> bool:
        return self.go_to(1, cause)

    def last(self, cause: NavigationCause = NavigationCause.USER) -> bool:
        return self.go_to(self._deck.total_slides, cause)

    def go_to_chapter(
        self, chapter_id: Any, cause: NavigationCause = NavigationCause.USER
    ) -> bool:
        for chapter in self._deck.chapters:
            if chapter.id == chapter_id:
                return self.go_to(chapter.start, cause)
        self._debug_print(f"ignoring unknown chapter {chapter_id!r}")
        return False

    def next_chapter(self, cause: NavigationCause = NavigationCause.USER) -> bool:
        index = self._chapter_index()
        if index + 1 >= len(self._deck.chapters):
            return False
        return self.go_to(self._deck.chapters[index + 1].start, cause)

    def previous_chapter(self, cause: NavigationCause = NavigationCause.USER) -> bool:
        index = self._chapter_index()
        if index == 0:
            # From anywhere in the first chapter, go back to the very first slide.
            return self.go_to(1, cause)
        return self.go_to(self._deck.chapters[index - 1].start, cause)

    def toggle_sidebar(self) -> bool:
        self._sidebar_visible = not self._sidebar_visible
        self._debug_print(f"sidebar {'shown' if self._sidebar_visible else 'hidden'}")
        for listener in list(self._sidebar_listeners):
            listener(self._sidebar_visible)
        return self._sidebar_visible

    def _chapter_index(self) -> int:
        current = self.current_chapter
        for index, chapter in enumerate(self._deck.chapters):
            if chapter.id == current:
                return index
        return 0

    def _classify(self, position: int) -> tuple[SlideStatus, ...]:
        statuses = []
        for slide in range(1, self._deck.total_slides + 1):
            if slide == position:
                statuses.append(SlideStatus.ACTIVE)
            elif slide < position:
                statuses.append(SlideStatus.SHOWN)
            else:
                statuses.append(SlideStatus.UPCOMING)
        return tuple(statuses)
