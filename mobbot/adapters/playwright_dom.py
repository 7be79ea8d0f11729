"""Playwright adapter — implements the DomProbe port against a live browser page.

Each scan queries every ``button`` on the page and wraps the handles as
DomElement. Handles from the previous scan are disposed before the next one so
the page does not accumulate remote object references.
"""

import sys
from typing import List

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from mobbot.ports.dom import DomElement


def _log(msg: str):
    print(msg, file=sys.stderr)


class PlaywrightDomProbe:
    """DomProbe backed by ``playwright.async_api.Page``."""

    def __init__(self, page: Page, selector: str = "button"):
        self._page = page
        self._selector = selector
        self._handles: list = []

    async def query_clickable(self) -> List[DomElement]:
        await self._dispose_handles()
        handles = await self._page.query_selector_all(self._selector)
        self._handles = list(handles)
        elements = []
        for handle in self._handles:
            text = await handle.inner_text() or ""
            class_attr = await handle.get_attribute("class") or ""
            elements.append(DomElement(text=text, classes=frozenset(class_attr.split()), handle=handle))
        return elements

    async def click(self, element: DomElement) -> None:
        if element.handle is None:
            raise ValueError("element has no page handle")
        await element.handle.click()

    async def release(self) -> None:
        await self._dispose_handles()

    async def _dispose_handles(self):
        handles, self._handles = self._handles, []
        for handle in handles:
            try:
                await handle.dispose()
            except PlaywrightError as e:
                # Page navigated away; the handle is already gone
                _log(f"[PlaywrightDom] dispose skipped: {e}")
