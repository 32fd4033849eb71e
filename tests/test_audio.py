"""Tests for clip addressing and audio backends."""

import asyncio
import os
import shutil

import pytest

from slidedeck.audio import (
    ProcessAudioPlayer,
    SlideAudioError,
    clip_key,
    clip_path,
    create_player,
)
from slidedeck.config import NarrationConfig

requires_true = pytest.mark.skipif(
    shutil.which("true") is None or shutil.which("false") is None,
    reason="needs the POSIX true/false commands",
)


def test_clip_key():
    assert clip_key(7) == "slide-7"


def test_clip_path(tmp_path):
    config = NarrationConfig(audio_dir=str(tmp_path), extension="wav")
    assert clip_path(config, "slide-3") == os.path.join(str(tmp_path), "slide-3.wav")


def test_unsupported_backend():
    with pytest.raises(SlideAudioError, match="Unsupported audio backend"):
        create_player(NarrationConfig(backend="speaker"))


def test_missing_player_command():
    config = NarrationConfig(player_command=("definitely-not-an-audio-player",))
    with pytest.raises(SlideAudioError, match="not found"):
        create_player(config)


@requires_true
def test_create_process_player(tmp_path):
    config = NarrationConfig(audio_dir=str(tmp_path), player_command=("true",))
    assert isinstance(create_player(config), ProcessAudioPlayer)


@requires_true
@pytest.mark.asyncio
async def test_missing_clip_raises(tmp_path):
    player = ProcessAudioPlayer(
        NarrationConfig(audio_dir=str(tmp_path), player_command=("true",))
    )
    with pytest.raises(SlideAudioError, match="not found"):
        await player.play("slide-1")


@requires_true
@pytest.mark.asyncio
async def test_plays_existing_clip(tmp_path):
    (tmp_path / "slide-1.mp3").write_bytes(b"ID3")
    player = ProcessAudioPlayer(
        NarrationConfig(audio_dir=str(tmp_path), player_command=("true",))
    )
    await player.play("slide-1")


@requires_true
@pytest.mark.asyncio
async def test_failing_player_raises(tmp_path):
    (tmp_path / "slide-2.mp3").write_bytes(b"ID3")
    player = ProcessAudioPlayer(
        NarrationConfig(audio_dir=str(tmp_path), player_command=("false",))
    )
    with pytest.raises(SlideAudioError, match="exited with status"):
        await player.play("slide-2")


@pytest.fixture
def sleeping_player(tmp_path):
    if shutil.which("sh") is None:
        pytest.skip("needs a POSIX shell")
    (tmp_path / "slide-1.mp3").write_bytes(b"ID3")
    # The clip path lands in $1 and is ignored.
    return ProcessAudioPlayer(
        NarrationConfig(
            audio_dir=str(tmp_path),
            player_command=("sh", "-c", "exec sleep 30", "sh"),
        )
    )


@pytest.fixture
def spawned(monkeypatch):
    """Processes started by the player."""
    processes = []
    original = asyncio.create_subprocess_exec

    async def recording_exec(*args, **kwargs):
        process = await original(*args, **kwargs)
        processes.append(process)
        return process

    monkeypatch.setattr(asyncio, "create_subprocess_exec", recording_exec)
    return processes


@pytest.mark.asyncio
async def test_cancel_terminates_player(sleeping_player, spawned):
    task = asyncio.get_running_loop().create_task(sleeping_player.play("slide-1"))
    await asyncio.sleep(0.2)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(spawned) == 1
    assert spawned[0].returncode is not None


@pytest.mark.asyncio
async def test_cancel_while_starting_terminates_player(sleeping_player, spawned):
    task = asyncio.get_running_loop().create_task(sleeping_player.play("slide-1"))
    # Let play() reach the point where the process is still being started.
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(spawned) == 1
    assert spawned[0].returncode is not None
