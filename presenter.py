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
import asyncio
from typing import Callable, Optional, Protocol, Sequence

import termcolor

from slidedeck.controls import Command, InputEvent, parse_slide_fragment, resolve_command
from slidedeck.narration import NarrationController
from slidedeck.navigation import NavigationController, PositionChanged, SlideStatus


class DeckSurface(Protocol):
    """Something that can display the deck state."""

    def show_position(
        self,
        position: int,
        total_slides: int,
        chapter: int,
        statuses: Sequence[SlideStatus],
    ) -> None: ...

    def show_sidebar(self, visible: bool) -> None: ...

    def show_indicator(self, visible: bool) -> None: ...


class DeckPresenter:
    """Routes input to the controllers and controller state to the surface."""

    def __init__(
        self,
        navigation: NavigationController,
        narration: Optional[NarrationController] = None,
        surface: Optional[DeckSurface] = None,
        status_callback: Optional[Callable[[str], None]] = None,
    ):
        self._navigation = navigation
        self._narration = narration
        self._surface = surface
        self._status_callback = status_callback or (
            lambda message: termcolor.cprint(message, color="green")
        )
        if surface is not None:
            navigation.subscribe(self._render_position)
            navigation.subscribe_sidebar(surface.show_sidebar)
            if narration is not None:
                narration.on_indicator(surface.show_indicator)

    @property
    def navigation(self) -> NavigationController:
        return self._navigation

    @property
    def narration(self) -> Optional[NarrationController]:
        return self._narration

    def start(self, fragment: Optional[str] = None) -> int:
        """Shows the deep-linked slide, or the first slide if the link is invalid."""
        slide = parse_slide_fragment(fragment, self._navigation.total_slides) or 1
        self._navigation.go_to(slide)
        if self._surface is not None:
            self._surface.show_sidebar(self._navigation.sidebar_visible)
        return self._navigation.position

    def dispatch(self, command: Command) -> bool:
        name, argument = command
        navigation = self._navigation
        if name == "next":
            return navigation.next()
        elif name == "previous":
            return navigation.previous()
        elif name == "first":
            return navigation.first()
        elif name == "last":
            return navigation.last()
        elif name == "go_to":
            return navigation.go_to(argument)
        elif name == "go_to_chapter":
            return navigation.go_to_chapter(argument)
        elif name == "next_chapter":
            return navigation.next_chapter()
        elif name == "previous_chapter":
            return navigation.previous_chapter()
        elif name == "toggle_sidebar":
            navigation.toggle_sidebar()
            return True
        elif name == "toggle_narration":
            if self._narration is None:
                self._status_callback("Narration is not available for this deck.")
                return False
            self._narration.toggle()
            return True
        raise ValueError(f"Unknown deck command: {name}")

    def handle_event(self, event: InputEvent) -> bool:
        command = resolve_command(event)
        if command is None:
            return False
        return self.dispatch(command)

    async def run(self, events: "asyncio.Queue[Optional[InputEvent]]") -> None:
        """Handles input events one at a time until a None event arrives."""
        try:
            while True:
                event = await events.get()
                if event is None:
                    break
                self.handle_event(event)
        finally:
            if self._narration is not None:
                self._narration.stop()

    def _render_position(self, event: PositionChanged) -> None:
        self._surface.show_position(
            event.position,
            self._navigation.total_slides,
            event.chapter,
            self._navigation.slide_statuses(),
        )
