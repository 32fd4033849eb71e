import asyncio
from typing import Optional

import pytest

from slidedeck.audio import SlideAudioError
from slidedeck.config import DeckConfig
from slidedeck.narration import NarrationController
from slidedeck.navigation import NavigationController, PositionChanged


class FakePlayer:
    """Audio player whose clips finish only when the test says so."""

    def __init__(self) -> None:
        self.requests: list[str] = []
        self.cancelled: list[str] = []
        self.failing: set[str] = set()
        self._current: Optional[asyncio.Future] = None

    async def play(self, key: str) -> None:
        self.requests.append(key)
        if key in self.failing:
            raise SlideAudioError(f"Audio clip not found: {key}")
        future = asyncio.get_running_loop().create_future()
        self._current = future
        try:
            await future
        except asyncio.CancelledError:
            self.cancelled.append(key)
            raise

    def finish(self) -> None:
        if self._current is not None and not self._current.done():
            self._current.set_result(None)


class RecordingSurface:
    def __init__(self) -> None:
        self.positions: list[tuple[int, int, int]] = []
        self.statuses: list[tuple[str, ...]] = []
        self.sidebar: list[bool] = []
        self.indicator: list[bool] = []

    def show_position(self, position, total_slides, chapter, statuses) -> None:
        self.positions.append((position, total_slides, chapter))
        self.statuses.append(tuple(status.value for status in statuses))

    def show_sidebar(self, visible: bool) -> None:
        self.sidebar.append(visible)

    def show_indicator(self, visible: bool) -> None:
        self.indicator.append(visible)


@pytest.fixture
def deck() -> DeckConfig:
    return DeckConfig.default()


@pytest.fixture
def messages() -> list[str]:
    return []


@pytest.fixture
def navigation(deck, messages) -> NavigationController:
    return NavigationController(deck, status_callback=messages.append)


@pytest.fixture
def moves(navigation) -> list[PositionChanged]:
    """Every position change announced by the navigation controller."""
    recorded: list[PositionChanged] = []
    navigation.subscribe(recorded.append)
    return recorded


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer()


@pytest.fixture
def indicator() -> list[bool]:
    return []


@pytest.fixture
def make_narration(player, navigation, messages, indicator):
    def _make(**kwargs) -> NarrationController:
        kwargs.setdefault("advance_delay", 0)
        kwargs.setdefault("settle_delay", 0)
        kwargs.setdefault("restart_delay", 0)
        controller = NarrationController(
            player, navigation, status_callback=messages.append, **kwargs
        )
        controller.on_indicator(indicator.append)
        return controller

    return _make


@pytest.fixture
def settle():
    """Lets every ready task on the loop run."""

    async def _settle(rounds: int = 50) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle
