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
import os
import shutil
from typing import Protocol

import termcolor

from .config import NarrationConfig


class SlideAudioError(RuntimeError):
    """Raised when a narration clip or audio backend cannot be used."""


class AudioPlayer(Protocol):
    """Plays pre-rendered narration clips addressed by key."""

    async def play(self, key: str) -> None:
        """Plays the clip to the end.

        Raises on load or playback failure. Cancelling the awaiting task must
        stop playback.
        """
        ...


def clip_key(slide: int) -> str:
    return f"slide-{slide}"


def clip_path(config: NarrationConfig, key: str) -> str:
    return os.path.join(config.audio_dir, f"{key}.{config.extension}")


class ProcessAudioPlayer:
    """Plays clips with an external command such as macOS `afplay`."""

    def __init__(self, config: NarrationConfig) -> None:
        executable = config.player_command[0]
        if shutil.which(executable) is None:
            raise SlideAudioError(
                f"Audio player `{executable}` not found. Install it or switch to a "
                "different audio backend."
            )
        self._config = config
        self._debug = config.debug

    async def play(self, key: str) -> None:
        path = clip_path(self._config, key)
        if not os.path.isfile(path):
            raise SlideAudioError(f"Audio clip not found: {path}")
        if self._debug:
            termcolor.cprint(f"[process] playing {path}", color="cyan")
        # Shielded so a cancel during startup still yields the process to stop.
        spawn = asyncio.ensure_future(
            asyncio.create_subprocess_exec(
                *self._config.player_command,
                path,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        )
        try:
            process = await asyncio.shield(spawn)
            returncode = await process.wait()
        except asyncio.CancelledError:
            await self._terminate_spawned(spawn)
            raise
        if returncode != 0:
            raise SlideAudioError(
                f"Audio player exited with status {returncode} for {path}"
            )

    async def _terminate_spawned(self, spawn: asyncio.Future) -> None:
        try:
            process = await spawn
        except OSError:
            # Nothing was started.
            return
        await self._terminate(process)

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        process.terminate()
        try:
            await asyncio.wait_for(process.wait(), timeout=0.25)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()


def create_player(config: NarrationConfig) -> AudioPlayer:
    config.validate()
    backend = config.backend.lower()
    if backend == "process":
        return ProcessAudioPlayer(config)
    elif backend == "pyaudio":
        try:
            from .pyaudio_player import PyAudioPlayer
        except ImportError as e:
            raise SlideAudioError(
                "Failed to import pyaudio_player. "
                "Make sure pyaudio is installed: pip install pyaudio"
            ) from e
        return PyAudioPlayer(config)
    raise SlideAudioError(f"Unsupported audio backend: {config.backend}")
