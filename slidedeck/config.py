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
import json
import os
from typing import Any, Optional


@dataclasses.dataclass(frozen=True, slots=True)
class Chapter:
    """A contiguous, inclusive range of slides."""

    id: int
    start: int
    end: int
    name: str = ""

    def contains(self, slide: int) -> bool:
        return self.start <= slide <= self.end


@dataclasses.dataclass(slots=True)
class DeckConfig:
    """Bounds of a deck: how many slides and how they group into chapters."""

    total_slides: int
    chapters: tuple[Chapter, ...]

    def validate(self) -> None:
        if not isinstance(self.total_slides, int) or self.total_slides <= 0:
            raise ValueError("total_slides must be a positive integer")
        if not self.chapters:
            raise ValueError("at least one chapter is required")
        expected_start = 1
        previous_id: Optional[int] = None
        for chapter in self.chapters:
            if previous_id is not None and chapter.id <= previous_id:
                raise ValueError(
                    f"chapter ids must be strictly ascending (got {chapter.id} after {previous_id})"
                )
            if chapter.start != expected_start:
                raise ValueError(
                    f"chapter {chapter.id} must start at slide {expected_start}, not {chapter.start}"
                )
            if chapter.end < chapter.start:
                raise ValueError(f"chapter {chapter.id} ends before it starts")
            previous_id = chapter.id
            expected_start = chapter.end + 1
        if expected_start - 1 != self.total_slides:
            raise ValueError(
                f"chapters cover slides 1..{expected_start - 1} but the deck has "
                f"{self.total_slides} slides"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeckConfig":
        try:
            chapters = tuple(
                Chapter(
                    id=int(item["id"]),
                    start=int(item["start"]),
                    end=int(item["end"]),
                    name=str(item.get("name", "")),
                )
                for item in data["chapters"]
            )
            config = cls(total_slides=int(data["total_slides"]), chapters=chapters)
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed deck configuration: {exc}") from exc
        config.validate()
        return config

    @classmethod
    def default(cls) -> "DeckConfig":
        config = cls(total_slides=24, chapters=DEFAULT_CHAPTERS)
        config.validate()
        return config


DEFAULT_CHAPTERS: tuple[Chapter, ...] = (
    Chapter(1, 1, 2, "Welcome"),
    Chapter(2, 3, 5, "Our Story"),
    Chapter(3, 6, 9, "By the Numbers"),
    Chapter(4, 10, 12, "Programs"),
    Chapter(5, 13, 15, "Success"),
    Chapter(6, 16, 19, "Impact"),
    Chapter(7, 20, 22, "Alumni"),
    Chapter(8, 23, 24, "Close"),
)


def load_deck_config(path: str) -> DeckConfig:
    """Reads a deck definition from a JSON file."""
    with open(path, "r", encoding="utf-8") as stream:
        data = json.load(stream)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return DeckConfig.from_dict(data)


@dataclasses.dataclass(slots=True)
class NarrationConfig:
    """Configuration for slide narration playback."""

    enabled: bool = False
    backend: str = "process"
    audio_dir: str = dataclasses.field(
        default_factory=lambda: os.environ.get("SLIDEDECK_AUDIO_DIR", "audio")
    )
    extension: str = "mp3"
    # Command used by the "process" backend; the clip path is appended.
    player_command: tuple[str, ...] = ("afplay",)
    auto_advance: bool = True
    debug: bool = False

    def validate(self) -> None:
        if not self.backend:
            raise ValueError("backend must be provided")
        if not self.audio_dir:
            raise ValueError("audio_dir must be provided")
        if not self.extension or self.extension.startswith("."):
            raise ValueError("extension must be given without a leading dot")
        if self.backend == "process" and not self.player_command:
            raise ValueError("player_command must be provided for the process backend")
