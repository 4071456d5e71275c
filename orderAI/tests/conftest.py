from __future__ import annotations

import copy
from typing import Any

import pytest

from orderAI.exceptions import DriverTimeoutError
from orderAI.models import MerchantConfig, OrderPlan


class FakePage:
    """In-memory stand-in for the browser: records every action in order."""

    def __init__(self, summary: str = "", hidden: tuple[str, ...] = ()) -> None:
        self.summary = summary
        self.hidden = set(hidden)
        self.calls: list[tuple[str, ...]] = []

    def goto(self, url: str) -> None:
        self.calls.append(("goto", url))

    def click(self, locator: str) -> None:
        if locator in self.hidden:
            raise DriverTimeoutError(locator, 10)
        self.calls.append(("click", locator))

    def fill(self, locator: str, value: str) -> None:
        if locator in self.hidden:
            raise DriverTimeoutError(locator, 10)
        self.calls.append(("fill", locator, value))

    def text_content(self, locator: str) -> str:
        self.calls.append(("read", locator))
        return self.summary

    @property
    def clicks(self) -> list[str]:
        return [c[1] for c in self.calls if c[0] == "click"]

    @property
    def fills(self) -> dict[str, str]:
        return {c[1]: c[2] for c in self.calls if c[0] == "fill"}


CAFE: dict[str, Any] = {
    "name": "Test Cafe",
    "baseUrl": "http://cafe.test/menu",
    "selectors": {
        "item.chai tea latte": "#chai",
        "item.cold brew": "#cold-brew",
        "item.matcha latte": "#matcha",
        "size.medium": "#size-m",
        "size.large": "#size-l",
        "modifier.oat milk": "#mod-oat",
        "modifier.almond milk": "#mod-almond",
        "modifier.vanilla": "#mod-vanilla",
        "button.add": "#add",
        "button.viewCart": "#cart",
        "button.checkout": "#checkout",
        "field.name": "#f-name",
        "field.phone": "#f-phone",
        "field.time": "#f-time",
    },
    "normalize": {
        "items": {"matcha": "matcha latte", "coldbrew": "cold brew"},
        "sizes": {"grande": "medium", "venti": "large"},
        "modifiers": {"oat": "oat milk", "almond": "almond milk"},
    },
    "menu": {
        "items": [
            {"name": "Chai Tea Latte", "aliases": ["chai"]},
            {"name": "Cold Brew", "aliases": ["Cold Coffee"]},
            {"name": "Matcha Latte"},
        ]
    },
    "availability": {"outOfStock": [], "substitutions": {}},
    "verification": {"summarySelector": "#summary"},
    "checkout": {"defaults": {"phone": "555-7777"}},
}


@pytest.fixture
def cafe_dict() -> dict[str, Any]:
    return copy.deepcopy(CAFE)


@pytest.fixture
def make_config(cafe_dict):  # type: ignore[no-untyped-def]
    def _make(**overrides: Any) -> MerchantConfig:
        data = copy.deepcopy(cafe_dict)
        for key, value in overrides.items():
            data[key] = value
        return MerchantConfig.model_validate(data)

    return _make


@pytest.fixture
def cafe(make_config) -> MerchantConfig:  # type: ignore[no-untyped-def]
    return make_config()


def plan_of(*items: dict[str, Any], **rest: Any) -> OrderPlan:
    return OrderPlan.model_validate({"items": list(items), **rest})


@pytest.fixture(name="plan_of")
def plan_of_fixture():  # type: ignore[no-untyped-def]
    return plan_of
