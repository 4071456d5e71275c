# Purpose: Drive one storefront session through an order plan.
# Items are added strictly in plan order; an item that cannot be resolved is
# recorded and skipped, never fatal. Only a missing required selector or a driver
# fault (timeout, navigation) ends the run early. Stops before payment.

from typing import Callable, List, Optional

from orderAI.availability import apply_availability
from orderAI.driver import Page
from orderAI.logging_config import get_logger
from orderAI.models import (
    ExecutionOutcome,
    MerchantConfig,
    MissingItem,
    OrderItem,
    OrderPlan,
    ResolvedItem,
)
from orderAI.normalizer import normalize
from orderAI.resolver import resolve_item
from orderAI.selectorMap import (
    BUTTON_ADD,
    BUTTON_CHECKOUT,
    BUTTON_VIEW_CART,
    REQUIRED_KEYS,
    Namespace,
    SelectorMap,
    selector_key,
)
from orderAI.verification import FAIL_LINE, PASS_LINE, verify

logger = get_logger(__name__)

CHECKOUT_FIELDS = ("name", "phone", "time")
LAST_RESORT_VALUES = {"name": "Guest", "phone": "555-0101", "time": "12:30"}


class OutcomeBuilder:
    """Accumulates one run's log lines, misses and mismatches."""

    def __init__(self, echo: Optional[Callable[[str], None]] = None):
        self.echo = echo
        self.lines: List[str] = []
        self.missing: List[MissingItem] = []
        self.resolved: List[ResolvedItem] = []
        self.mismatches: List[str] = []

    def say(self, line: str) -> None:
        self.lines.append(line)
        logger.debug(line)
        if self.echo:
            self.echo(line)

    def item_missing(self, asked: str, suggestions: List[str]) -> None:
        self.missing.append(MissingItem(asked=asked, suggestions=list(suggestions)))

    def build(self, ok: bool, verified: bool) -> ExecutionOutcome:
        return ExecutionOutcome(
            ok=ok,
            verified=verified,
            missing_items=list(self.missing),
            verification_mismatches=list(self.mismatches),
            resolved_items=list(self.resolved),
            log=list(self.lines),
        )


def _declared_field_keys(config: MerchantConfig) -> List[str]:
    declared = config.checkout.fields
    return [getattr(declared, f) for f in CHECKOUT_FIELDS if getattr(declared, f)]


def preflight(config: MerchantConfig) -> None:
    """Raise ConfigurationError before any browser action if a required selector is absent."""
    SelectorMap(config).check_required(REQUIRED_KEYS + tuple(_declared_field_keys(config)))


def _add_item(page: Page, config: MerchantConfig, selectors: SelectorMap, item: OrderItem, out: OutcomeBuilder) -> None:
    asked = item.name or ""
    resolved = resolve_item(config, asked)
    if not resolved.key:
        out.say(
            f'[executor] Could not find a button for "{asked}". '
            "Check config.normalize.items or menu.aliases."
        )
        if resolved.suggestions:
            out.say(f'[suggest] NOT_FOUND: "{asked}" → did you mean: {", ".join(resolved.suggestions)} ?')
        out.item_missing(asked, resolved.suggestions)
        return

    size = normalize(item.size, config.normalize.sizes)
    mods = [m for m in (normalize(m, config.normalize.modifiers) for m in item.modifiers) if m]
    current = ResolvedItem(asked=asked, key=resolved.key, size=size or None, modifiers=mods)
    out.resolved.append(current)

    for _ in range(item.qty or 1):
        out.say(
            f"[executor] Add {size + ' ' if size else ''}{current.canonical}"
            f"{' (' + ', '.join(mods) + ')' if mods else ''}"
        )
        page.click(selectors.required(resolved.key))

        if size:
            size_key = selector_key(Namespace.SIZE, size)
            if selectors.has(size_key):
                page.click(selectors.required(size_key))
            else:
                out.say(f"[executor] No selector for size '{size}', skipping size click")

        for m in mods:
            decision = apply_availability(config, m)
            if decision.note:
                out.say(f"[executor] {decision.note}")
            if decision.substitute:
                current.applied[m] = decision.substitute
                page.click(selectors.required(decision.action_key))
            elif decision.action_key and selectors.has(decision.action_key):
                current.applied[m] = m
                page.click(selectors.required(decision.action_key))
            else:
                current.applied[m] = None
                if decision.action_key:
                    out.say(f"[executor] No selector for modifier '{m}', skipping")

        page.click(selectors.required(BUTTON_ADD))


# Checkout values: plan first, then checkout.defaults, then a fixed last resort.
def checkout_values(config: MerchantConfig, plan: OrderPlan) -> dict:
    defaults = config.checkout.defaults
    from_plan = {
        "name": plan.customer.name,
        "phone": plan.customer.phone,
        "time": plan.fulfillment.time,
    }
    return {
        f: from_plan[f] or getattr(defaults, f) or LAST_RESORT_VALUES[f]
        for f in CHECKOUT_FIELDS
    }


def _checkout(page: Page, config: MerchantConfig, selectors: SelectorMap, plan: OrderPlan, out: OutcomeBuilder) -> None:
    if selectors.has(BUTTON_VIEW_CART):
        page.click(selectors.required(BUTTON_VIEW_CART))
    page.click(selectors.required(BUTTON_CHECKOUT))

    values = checkout_values(config, plan)
    for f in CHECKOUT_FIELDS:
        declared = getattr(config.checkout.fields, f)
        key = declared or selector_key(Namespace.FIELD, f)
        if declared or selectors.has(key):
            page.fill(selectors.required(key), values[f])
        else:
            logger.debug("No selector for checkout field %r, leaving it blank", f)


def execute_plan(
    page: Page,
    config: MerchantConfig,
    plan: OrderPlan,
    echo: Optional[Callable[[str], None]] = None,
) -> ExecutionOutcome:
    preflight(config)
    selectors = SelectorMap(config)
    out = OutcomeBuilder(echo)

    out.say(f"[executor] Go to {config.base_url}")
    page.goto(config.base_url)

    for item in plan.items:
        _add_item(page, config, selectors, item, out)

    _checkout(page, config, selectors, plan, out)

    if not config.verification.summary_selector:
        out.say("[verify] No summary selector configured; skipping verification")
    result = verify(page, config, out.resolved, missing_count=len(out.missing))
    for mismatch in result.mismatches:
        out.mismatches.append(mismatch)
        out.say(f"[verify] {mismatch}")

    if result.ok:
        out.say(PASS_LINE)
    else:
        out.say(FAIL_LINE)
        for m in out.missing:
            out.say(
                f'[suggest] ITEM_NOT_FOUND: "{m.asked}" → suggestions: '
                f'{", ".join(m.suggestions) if m.suggestions else "none"}'
            )

    out.say("✅ Reached checkout (stopping before payment).")
    logger.info(
        "Run finished for %s: ok=%s verified=%s missing=%d mismatches=%d",
        config.base_url, result.ok, result.verified, len(out.missing), len(out.mismatches),
    )
    return out.build(ok=result.ok, verified=result.verified)
