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
import json
import os
from typing import Any, Optional, Sequence
from urllib.parse import urlparse

import termcolor
from playwright.async_api import Page, async_playwright

from .controls import KEY_COMMANDS, InputEvent
from .navigation import SlideStatus

# Installed before any page script runs. Forwards the deck's keyboard and
# pointer events to Python instead of handling them in the page.
INPUT_BRIDGE_SCRIPT = """
(() => {
  const handledKeys = new Set(%s);
  const send = (payload) => {
    if (typeof window.slidedeckInput === 'function') {
      window.slidedeckInput(payload);
    }
  };
  document.addEventListener('keydown', (e) => {
    const tag = e.target && e.target.tagName ? e.target.tagName : '';
    if (tag === 'INPUT' || tag === 'TEXTAREA') return;
    if (handledKeys.has(e.key) && !e.ctrlKey && !e.metaKey) e.preventDefault();
    send({kind: 'key', key: e.key, ctrl: e.ctrlKey, meta: e.metaKey, targetTag: tag});
  });
  document.addEventListener('click', (e) => {
    const target = e.target;
    if (!(target instanceof Element)) return;
    if (target.closest('#sidebar-toggle')) {
      send({kind: 'sidebar_click', targetTag: target.tagName});
      return;
    }
    const item = target.closest('.chapter-list .nav-item');
    if (item) {
      send({kind: 'chapter_click', chapter: item.dataset.chapter, targetTag: target.tagName});
      return;
    }
    if (target.closest('#presentation')) {
      send({
        kind: 'slide_click',
        targetTag: target.tagName,
        interactive: Boolean(target.closest('a, button')),
      });
    }
  });
})();
""" % json.dumps(sorted(set(KEY_COMMANDS) | set("123456789")))

RENDER_POSITION_SCRIPT = """
({position, total, chapter, statuses}) => {
  document.querySelectorAll('.slide').forEach((slide, index) => {
    slide.classList.remove('active', 'prev');
    const status = statuses[index];
    if (status === 'active' || status === 'prev') slide.classList.add(status);
  });
  const current = document.getElementById('current-slide');
  if (current) current.textContent = String(position);
  const totalEl = document.getElementById('total-slides');
  if (totalEl) totalEl.textContent = String(total);
  document.querySelectorAll('.chapter-list .nav-item').forEach((item) => {
    item.classList.toggle('active', parseInt(item.dataset.chapter, 10) === chapter);
  });
}
"""

RENDER_SIDEBAR_SCRIPT = """
(visible) => {
  const toggle = (id, cls, on) => {
    const el = document.getElementById(id);
    if (el) el.classList.toggle(cls, on);
  };
  toggle('sidebar', 'collapsed', !visible);
  toggle('presentation', 'expanded', !visible);
  toggle('sidebar-toggle', 'visible', !visible);
}
"""

RENDER_INDICATOR_SCRIPT = """
(show) => {
  const elementId = 'narration-indicator';
  let indicator = document.getElementById(elementId);
  if (show) {
    if (!indicator) {
      indicator = document.createElement('div');
      indicator.id = elementId;
      indicator.textContent = 'Narration Active';
      indicator.style.position = 'fixed';
      indicator.style.top = '20px';
      indicator.style.right = '20px';
      indicator.style.background = 'rgba(0, 51, 102, 0.95)';
      indicator.style.color = '#fff';
      indicator.style.padding = '10px 18px';
      indicator.style.borderRadius = '24px';
      indicator.style.zIndex = '10000';
      indicator.style.pointerEvents = 'none';
      indicator.style.transition = 'opacity 0.3s';
      document.body.appendChild(indicator);
    }
    indicator.style.opacity = '1';
  } else if (indicator) {
    indicator.style.opacity = '0';
    setTimeout(() => indicator.remove(), 300);
  }
}
"""


class PlaywrightDeck:
    """Shows an HTML slide deck in a local Chromium and mirrors deck state into it.

    DOM input is queued on `events` as InputEvent objects; a None entry means
    the page was closed. Render calls are queued and applied in order.
    """

    def __init__(
        self,
        deck_url: str,
        screen_size: tuple[int, int] = (1440, 900),
        debug: bool = False,
    ):
        self._deck_url = deck_url
        self._screen_size = screen_size
        self._debug = debug
        self.events: asyncio.Queue[Optional[InputEvent]] = asyncio.Queue()
        self._render_queue: asyncio.Queue[tuple[str, Any]] = asyncio.Queue()
        self._render_task: Optional[asyncio.Task] = None
        self._page: Optional[Page] = None

    def _debug_print(self, message: str, color: str = "cyan") -> None:
        if self._debug:
            termcolor.cprint(f"[Browser] {message}", color=color)

    async def __aenter__(self):
        print("Opening deck...")
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            args=[
                "--disable-extensions",
                "--disable-plugins",
                "--disable-dev-shm-usage",
                "--disable-background-networking",
                "--disable-default-apps",
                "--disable-sync",
                "--autoplay-policy=no-user-gesture-required",
            ],
            headless=bool(os.environ.get("PLAYWRIGHT_HEADLESS", False)),
        )
        self._context = await self._browser.new_context(
            viewport={
                "width": self._screen_size[0],
                "height": self._screen_size[1],
            }
        )
        self._page = await self._context.new_page()
        await self._page.expose_function("slidedeckInput", self._handle_input)
        await self._page.add_init_script(INPUT_BRIDGE_SCRIPT)
        self._page.on("close", lambda _: self.events.put_nowait(None))
        await self._page.goto(self._deck_url)
        self._render_task = asyncio.get_running_loop().create_task(self._render_loop())

        termcolor.cprint(
            f"Opened {self._deck_url}.",
            color="green",
            attrs=["bold"],
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._render_task:
            self._render_task.cancel()
            try:
                await self._render_task
            except asyncio.CancelledError:
                pass
            self._render_task = None
        if self._context:
            await self._context.close()
        try:
            await self._browser.close()
        except Exception as e:
            # Browser was already shut down because of SIGINT or such.
            if "Connection closed" in str(e):
                pass
            else:
                raise

        await self._playwright.stop()

    @property
    def fragment(self) -> str:
        if not self._page or self._page.is_closed():
            return ""
        return urlparse(self._page.url).fragment

    def _handle_input(self, payload: dict[str, Any]) -> None:
        event = InputEvent.from_payload(payload or {})
        self._debug_print(f"input {event}")
        self.events.put_nowait(event)

    def show_position(
        self,
        position: int,
        total_slides: int,
        chapter: int,
        statuses: Sequence[SlideStatus],
    ) -> None:
        self._render_queue.put_nowait(
            (
                RENDER_POSITION_SCRIPT,
                {
                    "position": position,
                    "total": total_slides,
                    "chapter": chapter,
                    "statuses": [status.value for status in statuses],
                },
            )
        )

    def show_sidebar(self, visible: bool) -> None:
        self._render_queue.put_nowait((RENDER_SIDEBAR_SCRIPT, visible))

    def show_indicator(self, visible: bool) -> None:
        self._render_queue.put_nowait((RENDER_INDICATOR_SCRIPT, visible))

    async def _render_loop(self) -> None:
        while True:
            script, argument = await self._render_queue.get()
            if not self._page or self._page.is_closed():
                continue
            try:
                await self._page.evaluate(script, argument)
            except Exception as e:  # noqa: BLE001
                # A page that is navigating or closing must not stop the deck.
                self._debug_print(f"render failed: {e}", color="yellow")
