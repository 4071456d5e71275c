# Purpose: Typed access to a merchant's flat selector map ("item.latte" -> locator).
# Required keys raise ConfigurationError; optional keys are probed with has()/optional()
# and skipped by the caller when absent.

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from orderAI.exceptions import ConfigurationError
from orderAI.models import MerchantConfig


class Namespace(str, Enum):
    ITEM = "item"
    SIZE = "size"
    MODIFIER = "modifier"
    BUTTON = "button"
    FIELD = "field"


BUTTON_ADD = "button.add"
BUTTON_CHECKOUT = "button.checkout"
BUTTON_VIEW_CART = "button.viewCart"

REQUIRED_KEYS = (BUTTON_ADD, BUTTON_CHECKOUT)

# Keys a stored merchant must carry before the runner is worth invoking.
MUST_HAVE_KEYS = (BUTTON_ADD, BUTTON_CHECKOUT, "field.name", "field.phone", "field.time")


def selector_key(ns: Namespace, name: str) -> str:
    return f"{ns.value}.{name}"


class SelectorMap:
    """Read-only view over ``MerchantConfig.selectors``.

    An empty locator string counts as absent.
    """

    def __init__(self, config: MerchantConfig):
        self._selectors = config.selectors

    def has(self, key: Optional[str]) -> bool:
        return bool(key) and bool(self._selectors.get(key))

    def optional(self, key: Optional[str]) -> Optional[str]:
        if not key:
            return None
        return self._selectors.get(key) or None

    def required(self, key: str) -> str:
        locator = self._selectors.get(key)
        if not locator:
            raise ConfigurationError(key)
        return locator

    def labels(self, ns: Namespace) -> List[str]:
        """Canonical labels configured under ``ns``, in declaration order."""
        prefix = ns.value + "."
        return [k[len(prefix):] for k in self._selectors if k.startswith(prefix)]

    def check_required(self, keys=REQUIRED_KEYS) -> None:
        for key in keys:
            self.required(key)


# Completeness check used by the API before a merchant config is run.
# Works on the raw dict so it can report on configs that would not parse.
def validate_config(cfg: Any) -> Tuple[bool, List[str]]:
    missing: List[str] = []
    cfg = cfg if isinstance(cfg, dict) else {}
    selectors: Dict[str, Any] = cfg.get("selectors") if isinstance(cfg.get("selectors"), dict) else {}

    if not cfg.get("name"):
        missing.append("name")
    if not cfg.get("baseUrl"):
        missing.append("baseUrl")
    if not cfg.get("selectors"):
        missing.append("selectors")

    for key in MUST_HAVE_KEYS:
        if not selectors.get(key):
            missing.append(f"selectors.{key}")

    if not any(k.startswith("item.") for k in selectors):
        missing.append("selectors.item.<your-item>")

    return not missing, missing
