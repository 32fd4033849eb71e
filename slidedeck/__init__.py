"""Chapter-grouped slide navigation with narrated auto-advance."""

from .audio import AudioPlayer, SlideAudioError, create_player
from .config import Chapter, DeckConfig, NarrationConfig, load_deck_config
from .narration import NarrationController, NarrationState
from .navigation import NavigationCause, NavigationController, PositionChanged

__all__ = [
    "AudioPlayer",
    "Chapter",
    "DeckConfig",
    "NarrationConfig",
    "NarrationController",
    "NarrationState",
    "NavigationCause",
    "NavigationController",
    "PositionChanged",
    "SlideAudioError",
    "create_player",
    "load_deck_config",
]
