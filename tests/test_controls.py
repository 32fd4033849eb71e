"""Tests for input resolution and deep links."""

import pytest

from slidedeck.controls import InputEvent, parse_slide_fragment, resolve_command


@pytest.mark.parametrize(
    "key, expected",
    [
        ("ArrowRight", ("next", None)),
        ("ArrowDown", ("next", None)),
        (" ", ("next", None)),
        ("ArrowLeft", ("previous", None)),
        ("ArrowUp", ("previous", None)),
        ("PageDown", ("next_chapter", None)),
        ("PageUp", ("previous_chapter", None)),
        ("Home", ("first", None)),
        ("End", ("last", None)),
        ("s", ("toggle_sidebar", None)),
        ("S", ("toggle_sidebar", None)),
        ("v", ("toggle_narration", None)),
        ("V", ("toggle_narration", None)),
        ("3", ("go_to_chapter", 3)),
        ("9", ("go_to_chapter", 9)),
        ("0", None),
        ("x", None),
        ("Enter", None),
    ],
)
def test_key_commands(key, expected):
    assert resolve_command(InputEvent(kind="key", key=key)) == expected


def test_digit_with_modifier_is_ignored():
    assert resolve_command(InputEvent(kind="key", key="2", ctrl=True)) is None
    assert resolve_command(InputEvent(kind="key", key="2", meta=True)) is None


def test_arrow_with_modifier_still_navigates():
    assert resolve_command(InputEvent(kind="key", key="ArrowRight", ctrl=True)) == ("next", None)


@pytest.mark.parametrize("tag", ["INPUT", "TEXTAREA"])
def test_typing_in_text_fields_is_ignored(tag):
    assert resolve_command(InputEvent(kind="key", key="ArrowRight", target_tag=tag)) is None


def test_slide_click_advances():
    assert resolve_command(InputEvent(kind="slide_click", target_tag="DIV")) == ("next", None)


@pytest.mark.parametrize(
    "event",
    [
        InputEvent(kind="slide_click", target_tag="A"),
        InputEvent(kind="slide_click", target_tag="BUTTON"),
        InputEvent(kind="slide_click", target_tag="SPAN", interactive=True),
    ],
)
def test_clicks_on_links_and_buttons_do_not_advance(event):
    assert resolve_command(event) is None


def test_chapter_click():
    assert resolve_command(InputEvent(kind="chapter_click", chapter=6)) == ("go_to_chapter", 6)
    assert resolve_command(InputEvent(kind="chapter_click")) is None


def test_sidebar_click():
    assert resolve_command(InputEvent(kind="sidebar_click")) == ("toggle_sidebar", None)


def test_event_from_payload():
    event = InputEvent.from_payload(
        {"kind": "chapter_click", "chapter": "4", "targetTag": "li"}
    )
    assert event == InputEvent(kind="chapter_click", chapter=4, target_tag="LI")


def test_event_from_payload_with_bad_chapter():
    event = InputEvent.from_payload({"kind": "chapter_click", "chapter": "intro"})
    assert event.chapter is None


@pytest.mark.parametrize(
    "fragment, expected",
    [
        ("#5", 5),
        ("12", 12),
        ("#24", 24),
        ("#0", None),
        ("#25", None),
        ("#-3", None),
        ("#abc", None),
        ("#²", None),
        ("#٣", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_slide_fragment(fragment, expected):
    assert parse_slide_fragment(fragment, 24) == expected
