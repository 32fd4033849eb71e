# -*- coding: utf-8 -*-
# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
PyAudio clip player.

Decodes WAV narration clips and writes them to an output stream chunk by
chunk from a worker thread, so that cancelling the playback task stops the
clip within one chunk.
"""

import asyncio
import os
import threading
import wave

import pyaudio
import termcolor

from .audio import SlideAudioError, clip_path
from .config import NarrationConfig

CHUNK_SIZE = 1024


class PyAudioPlayer:
    """Plays `<audio_dir>/<key>.wav` through the default output device."""

    def __init__(self, config: NarrationConfig) -> None:
        if config.extension.lower() != "wav":
            raise SlideAudioError("The pyaudio backend only plays .wav clips")
        self._config = config
        self._debug = config.debug
        self._pya = pyaudio.PyAudio()

    def _debug_print(self, message: str, color: str = "cyan") -> None:
        if self._debug:
            termcolor.cprint(f"[pyaudio] {message}", color=color)

    async def play(self, key: str) -> None:
        path = clip_path(self._config, key)
        if not os.path.isfile(path):
            raise SlideAudioError(f"Audio clip not found: {path}")
        stop_event = threading.Event()
        try:
            await asyncio.to_thread(self._play_file, path, stop_event)
        except asyncio.CancelledError:
            # The worker thread notices on its next chunk.
            stop_event.set()
            raise

    def _play_file(self, path: str, stop_event: threading.Event) -> None:
        try:
            clip = wave.open(path, "rb")
        except (wave.Error, EOFError) as e:
            raise SlideAudioError(f"Unreadable audio clip {path}: {e}") from e

        stream = None
        try:
            stream = self._pya.open(
                format=self._pya.get_format_from_width(clip.getsampwidth()),
                channels=clip.getnchannels(),
                rate=clip.getframerate(),
                output=True,
            )
            self._debug_print(f"playing {path}")
            while not stop_event.is_set():
                data = clip.readframes(CHUNK_SIZE)
                if not data:
                    break
                stream.write(data)
            if stop_event.is_set():
                self._debug_print(f"stopped {path}", color="yellow")
        except OSError as e:
            raise SlideAudioError(f"Audio playback failed for {path}: {e}") from e
        finally:
            if stream:
                stream.stop_stream()
                stream.close()
            clip.close()
