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
import argparse
import asyncio
import pathlib
import shlex
from typing import Optional

import termcolor
from rich.console import Console
from rich.table import Table

from presenter import DeckPresenter
from slidedeck.audio import SlideAudioError, create_player
from slidedeck.browser import PlaywrightDeck
from slidedeck.config import DeckConfig, NarrationConfig, load_deck_config
from slidedeck.narration import NarrationController
from slidedeck.navigation import NavigationController


PLAYWRIGHT_SCREEN_SIZE = (1440, 900)

console = Console()


def deck_url(location: str) -> str:
    if "://" in location:
        return location
    return pathlib.Path(location).resolve().as_uri()


def print_chapters(deck: DeckConfig) -> None:
    table = Table(title=f"{deck.total_slides} slides")
    table.add_column("Chapter", justify="right")
    table.add_column("Name")
    table.add_column("Slides", justify="right")
    for chapter in deck.chapters:
        table.add_row(
            str(chapter.id), chapter.name, f"{chapter.start}-{chapter.end}"
        )
    console.print(table)


async def run_presentation(
    location: str,
    deck: DeckConfig,
    narration_config: NarrationConfig,
    initial_slide: Optional[str] = None,
    narrate: bool = False,
    debug: bool = False,
) -> None:
    navigation = NavigationController(deck, debug=debug)
    narration = None
    if narration_config.enabled:
        try:
            narration = NarrationController(
                create_player(narration_config),
                navigation,
                auto_advance=narration_config.auto_advance,
                debug=narration_config.debug,
            )
        except (SlideAudioError, ValueError) as exc:
            termcolor.cprint(
                f"Failed to initialize narration: {exc}",
                color="red",
                attrs=["bold"],
            )

    async with PlaywrightDeck(
        deck_url(location), screen_size=PLAYWRIGHT_SCREEN_SIZE, debug=debug
    ) as surface:
        presenter = DeckPresenter(navigation, narration, surface)
        presenter.start(initial_slide or surface.fragment)
        if narrate and narration is not None:
            narration.toggle()
        await presenter.run(surface.events)


def main() -> int:
    parser = argparse.ArgumentParser(description="Present an HTML slide deck with narration.")
    parser.add_argument(
        "--deck",
        type=str,
        default=None,
        help="Path or URL of the HTML deck to present.",
    )
    parser.add_argument(
        "--deck-config",
        type=str,
        default=None,
        help="JSON file with total_slides and the chapter table. Defaults to the built-in deck.",
    )
    parser.add_argument(
        "--slide",
        type=str,
        default=None,
        help="Slide to open first (like a #12 deep link). Invalid values open slide 1.",
    )
    parser.add_argument(
        "--list-chapters",
        action="store_true",
        default=False,
        help="Print the chapter table and exit.",
    )
    parser.add_argument(
        "--narrate",
        action="store_true",
        default=False,
        help="Start narration mode as soon as the deck opens.",
    )
    parser.add_argument(
        "--no-audio",
        action="store_true",
        default=False,
        help="Disable narration entirely.",
    )
    parser.add_argument(
        "--no-auto-advance",
        action="store_true",
        default=False,
        help="Play the clip for each slide but never advance on its own.",
    )
    parser.add_argument(
        "--audio-dir",
        type=str,
        default=None,
        help="Directory holding slide-<n> clips (default: $SLIDEDECK_AUDIO_DIR or ./audio).",
    )
    parser.add_argument(
        "--audio-backend",
        type=str,
        choices=("process", "pyaudio"),
        default="process",
        help="Audio backend used to play narration clips.",
    )
    parser.add_argument(
        "--audio-ext",
        type=str,
        default=None,
        help="Clip file extension (default: mp3, or wav for the pyaudio backend).",
    )
    parser.add_argument(
        "--audio-player",
        type=str,
        default="afplay",
        help="Command used by the process backend; the clip path is appended.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable verbose logging.",
    )
    args = parser.parse_args()

    try:
        deck = (
            load_deck_config(args.deck_config)
            if args.deck_config
            else DeckConfig.default()
        )
    except (OSError, ValueError) as exc:
        termcolor.cprint(f"Invalid deck configuration: {exc}", color="red", attrs=["bold"])
        return 1

    if args.list_chapters:
        print_chapters(deck)
        return 0
    if not args.deck:
        parser.error("--deck is required unless --list-chapters is given")

    config_kwargs = dict(
        enabled=not args.no_audio,
        backend=args.audio_backend,
        extension=args.audio_ext or ("wav" if args.audio_backend == "pyaudio" else "mp3"),
        player_command=tuple(shlex.split(args.audio_player)),
        auto_advance=not args.no_auto_advance,
        debug=args.debug,
    )
    if args.audio_dir is not None:
        config_kwargs["audio_dir"] = args.audio_dir
    narration_config = NarrationConfig(**config_kwargs)

    asyncio.run(
        run_presentation(
            args.deck,
            deck,
            narration_config,
            initial_slide=args.slide,
            narrate=args.narrate,
            debug=args.debug,
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
