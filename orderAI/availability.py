# Purpose: Decide what to click for a requested modifier given the merchant's
# out-of-stock list. Out-of-stock never stops the order: it is either swapped
# for the first configured fallback or skipped with a note.

from dataclasses import dataclass
from typing import Optional

from orderAI.models import MerchantConfig
from orderAI.normalizer import norm_str
from orderAI.selectorMap import Namespace, SelectorMap, selector_key


@dataclass(frozen=True)
class AvailabilityDecision:
    action_key: Optional[str]
    note: Optional[str] = None
    substitute: Optional[str] = None


def is_out_of_stock(config: MerchantConfig, modifier: str) -> bool:
    return norm_str(modifier) in {norm_str(o) for o in config.availability.out_of_stock}


def apply_availability(config: MerchantConfig, modifier: str) -> AvailabilityDecision:
    if not is_out_of_stock(config, modifier):
        return AvailabilityDecision(action_key=selector_key(Namespace.MODIFIER, modifier))

    substitutions = {norm_str(k): v for k, v in config.availability.substitutions.items()}
    subs = substitutions.get(norm_str(modifier)) or []
    fallback = norm_str(subs[0]) if subs else ""
    fallback_key = selector_key(Namespace.MODIFIER, fallback)
    if fallback and SelectorMap(config).has(fallback_key):
        return AvailabilityDecision(
            action_key=fallback_key,
            note=f"'{modifier}' OOS → using '{fallback}'",
            substitute=fallback,
        )
    return AvailabilityDecision(
        action_key=None,
        note=f"'{modifier}' OOS and no substitution; skipping",
    )
