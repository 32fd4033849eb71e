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
Narration mode: one clip per slide with auto-advance.

All work happens on the running asyncio loop. Clip playback and the two
pacing delays are tasks; each one remembers the session generation it was
scheduled under and does nothing if the generation has moved on by the time
it runs. Starting a clip, reacting to user navigation and stopping all bump
the generation and cancel the previous clip and timer.
"""

import asyncio
import dataclasses
import enum
from typing import Callable, Coroutine, Optional

import termcolor

from .audio import AudioPlayer, clip_key
from .navigation import NavigationCause, NavigationController, PositionChanged

# Gap between the end of one clip and the move to the next slide.
ADVANCE_DELAY_SECONDS = 0.5
# Time given to the slide transition before the next clip starts.
SETTLE_DELAY_SECONDS = 0.3
# Pause before restarting narration after the user changed slides.
RESTART_DELAY_SECONDS = 0.1


class NarrationState(str, enum.Enum):
    IDLE = "idle"
    NARRATING = "narrating"
    AWAITING_ADVANCE_DELAY = "awaiting-advance-delay"
    ADVANCING = "advancing"


@dataclasses.dataclass(eq=False, slots=True)
class AudioHandle:
    """The one live narration clip."""

    slide: int
    key: str
    generation: int
    task: Optional[asyncio.Task] = None

    def release(self) -> None:
        if self.task and not self.task.done():
            self.task.cancel()


@dataclasses.dataclass(slots=True)
class NarrationSession:
    auto_advance: bool = True
    handle: Optional[AudioHandle] = None
    generation: int = 0


class NarrationController:
    """Plays the current slide's clip and drives the deck forward when it ends."""

    def __init__(
        self,
        player: AudioPlayer,
        navigation: Optional[NavigationController] = None,
        *,
        auto_advance: bool = True,
        debug: bool = False,
        status_callback: Optional[Callable[[str], None]] = None,
        advance_delay: float = ADVANCE_DELAY_SECONDS,
        settle_delay: float = SETTLE_DELAY_SECONDS,
        restart_delay: float = RESTART_DELAY_SECONDS,
    ) -> None:
        self._player = player
        self._navigation: Optional[NavigationController] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._auto_advance = auto_advance
        self._debug = debug
        self._status_callback = status_callback or (
            lambda message: termcolor.cprint(message, color="green")
        )
        self._advance_delay = advance_delay
        self._settle_delay = settle_delay
        self._restart_delay = restart_delay
        self._state = NarrationState.IDLE
        self._session: Optional[NarrationSession] = None
        self._pending: Optional[asyncio.Task] = None
        self._generation = 0
        self._indicator_listeners: list[Callable[[bool], None]] = []
        if navigation is not None:
            self.attach(navigation)

    def _debug_print(self, message: str, color: str = "cyan") -> None:
        if self._debug:
            termcolor.cprint(f"[Narration] {message}", color=color)

    def attach(self, navigation: NavigationController) -> None:
        if self._unsubscribe:
            self._unsubscribe()
        self._navigation = navigation
        self._unsubscribe = navigation.subscribe(self._on_position_changed)

    def on_indicator(self, listener: Callable[[bool], None]) -> None:
        self._indicator_listeners.append(listener)

    @property
    def state(self) -> NarrationState:
        return self._state

    @property
    def session(self) -> Optional[NarrationSession]:
        return self._session

    @property
    def auto_advance(self) -> bool:
        return self._auto_advance

    def set_auto_advance(self, enabled: bool) -> None:
        self._auto_advance = enabled
        if self._session:
            self._session.auto_advance = enabled
            if not enabled and self._state in (
                NarrationState.AWAITING_ADVANCE_DELAY,
                NarrationState.ADVANCING,
            ):
                self._cancel_pending()
                self._state = NarrationState.NARRATING

    def is_active(self) -> bool:
        return self._state is not NarrationState.IDLE

    def toggle(self) -> bool:
        if self._session:
            self._status_callback("Narration disabled.")
            self.stop()
            return False
        return self._start()

    def _start(self) -> bool:
        if self._navigation is None:
            termcolor.cprint(
                "Narration cannot start: presentation state is not available.",
                color="red",
            )
            return False
        self._session = NarrationSession(auto_advance=self._auto_advance)
        self._state = NarrationState.NARRATING
        self._status_callback("Narration enabled.")
        self._set_indicator(True)
        self._narrate_current()
        return True

    def stop(self) -> None:
        if self._session is None:
            return
        self._bump_generation()
        self._cancel_pending()
        self._release_handle()
        self._session = None
        self._state = NarrationState.IDLE
        self._set_indicator(False)

    def notify_external_position_change(self, position: int) -> None:
        """Restarts narration for a slide the user moved to."""
        if self._session is None:
            return
        self._debug_print(f"user moved to slide {position}; restarting narration")
        self._release_handle()
        self._cancel_pending()
        generation = self._bump_generation()
        self._state = NarrationState.NARRATING
        self._schedule(self._restart_after_delay(generation))

    def clip_finished(self, handle: AudioHandle) -> None:
        """Completion path for a clip, whether it played, failed to load or failed to play."""
        session = self._session
        if session is None or session.handle is not handle:
            self._debug_print(f"ignoring stale completion for {handle.key}", color="yellow")
            return
        session.handle = None
        if handle.task is not asyncio.current_task():
            handle.release()

        navigation = self._navigation
        if navigation.position >= navigation.total_slides:
            self._status_callback("Reached end of presentation.")
            self.stop()
            return
        if not session.auto_advance:
            self._debug_print(f"{handle.key} finished; auto-advance is off")
            return
        self._state = NarrationState.AWAITING_ADVANCE_DELAY
        self._schedule(self._advance_after_delay(session.generation))

    def _on_position_changed(self, event: PositionChanged) -> None:
        if event.cause is NavigationCause.AUTO_ADVANCE:
            return
        self.notify_external_position_change(event.position)

    def _narrate_current(self) -> None:
        session = self._session
        if session is None or self._navigation is None:
            return
        self._release_handle()
        slide = self._navigation.position
        handle = AudioHandle(
            slide=slide, key=clip_key(slide), generation=self._bump_generation()
        )
        session.handle = handle
        self._state = NarrationState.NARRATING
        self._debug_print(f"narrating slide {slide}")
        handle.task = asyncio.get_running_loop().create_task(self._play(handle))

    async def _play(self, handle: AudioHandle) -> None:
        try:
            await self._player.play(handle.key)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            termcolor.cprint(f"Error playing audio {handle.key}: {exc}", color="red")
        self.clip_finished(handle)

    async def _advance_after_delay(self, generation: int) -> None:
        await asyncio.sleep(self._advance_delay)
        if not self._is_current(generation):
            return
        self._state = NarrationState.ADVANCING
        if not self._navigation.next(cause=NavigationCause.AUTO_ADVANCE):
            self.stop()
            return
        await asyncio.sleep(self._settle_delay)
        if not self._is_current(generation):
            return
        self._pending = None
        self._narrate_current()

    async def _restart_after_delay(self, generation: int) -> None:
        await asyncio.sleep(self._restart_delay)
        if self._session is None or self._generation != generation:
            return
        self._pending = None
        self._narrate_current()

    def _is_current(self, generation: int) -> bool:
        return (
            self._session is not None
            and self._session.auto_advance
            and self._generation == generation
        )

    def _bump_generation(self) -> int:
        self._generation += 1
        if self._session:
            self._session.generation = self._generation
        return self._generation

    def _schedule(self, coro: Coroutine) -> None:
        self._cancel_pending()
        self._pending = asyncio.get_running_loop().create_task(coro)

    def _cancel_pending(self) -> None:
        pending, self._pending = self._pending, None
        if pending and not pending.done() and pending is not asyncio.current_task():
            pending.cancel()

    def _release_handle(self) -> None:
        session = self._session
        if session is None or session.handle is None:
            return
        handle, session.handle = session.handle, None
        handle.release()

    def _set_indicator(self, visible: bool) -> None:
        for listener in list(self._indicator_listeners):
            listener(visible)
