# Purpose: Resolve a free-text item name to a configured "item.<canonical>" key.
# Ladder, first hit wins: normalize map -> direct key -> menu name/alias ->
# unique menu word-prefix ("chai tea" -> "chai tea latte") -> fuzzy suggestions. Fuzzy matches are never clicked; they only feed diagnostics.

from typing import List, Optional, Tuple

from orderAI.logging_config import get_logger
from orderAI.models import MerchantConfig, ResolutionResult
from orderAI.normalizer import norm_str
from orderAI.selectorMap import Namespace, SelectorMap, selector_key

logger = get_logger(__name__)

SUGGESTION_FLOOR = 0.45
SUGGESTION_COUNT = 2


def levenshtein(a: str, b: str) -> int:
    if not a:
        return len(b)
    if not b:
        return len(a)
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        cur = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            cur[j] = min(prev[j] + 1, cur[j - 1] + 1, prev[j - 1] + cost)
        prev = cur
    return prev[-1]


def similarity(a: str, b: str) -> float:
    """1 - edit distance / longer length, on lower-cased trimmed input."""
    a, b = norm_str(a), norm_str(b)
    if not a or not b:
        return 0.0
    return 1 - levenshtein(a, b) / max(len(a), len(b))


# Labels from item.* selector keys first, then catalog names; de-duplicated, order kept.
def candidate_items(config: MerchantConfig) -> List[str]:
    names = SelectorMap(config).labels(Namespace.ITEM)
    names += [norm_str(it.name) for it in config.menu.items]
    return [n for n in dict.fromkeys(names) if n]


def suggest_closest(config: MerchantConfig, raw_name: str, top_n: int = SUGGESTION_COUNT) -> List[Tuple[str, float]]:
    n = norm_str(raw_name)
    scored = sorted(
        ((c, similarity(n, c)) for c in candidate_items(config)),
        key=lambda pair: pair[1],
        reverse=True,
    )
    return [pair for pair in scored if pair[1] >= SUGGESTION_FLOOR][:top_n]


def resolve_item(config: MerchantConfig, raw_name: str) -> ResolutionResult:
    n = norm_str(raw_name)
    if not n:
        return ResolutionResult(key=None)

    selectors = SelectorMap(config)

    via_norm = config.normalize.items.get(n)
    if via_norm and selectors.has(selector_key(Namespace.ITEM, via_norm)):
        return ResolutionResult(key=selector_key(Namespace.ITEM, via_norm))

    direct = selector_key(Namespace.ITEM, n)
    if selectors.has(direct):
        return ResolutionResult(key=direct)

    for entry in config.menu.items:
        canon = norm_str(entry.name)
        key = selector_key(Namespace.ITEM, canon)
        if not selectors.has(key):
            continue
        if canon == n or any(norm_str(alias) == n for alias in entry.aliases):
            return ResolutionResult(key=key)

    prefixed = _catalog_prefix_match(config, selectors, n)
    if prefixed:
        return ResolutionResult(key=prefixed)

    suggestions = suggest_closest(config, n)
    logger.debug("No exact match for %r; fuzzy candidates %s", n, suggestions)
    return ResolutionResult(key=None, suggestions=[name for name, _ in suggestions])


# A shortened name ("chai tea") matches a catalog entry whose name or alias starts
# with the same whole words ("chai tea latte"). Only an unambiguous hit above the
# suggestion floor counts.
def _catalog_prefix_match(config: MerchantConfig, selectors: SelectorMap, n: str) -> Optional[str]:
    words = n.split()
    hits: List[str] = []
    for entry in config.menu.items:
        key = selector_key(Namespace.ITEM, norm_str(entry.name))
        if not selectors.has(key) or key in hits:
            continue
        for label in [entry.name, *entry.aliases]:
            label_words = norm_str(label).split()
            if (
                len(label_words) > len(words)
                and label_words[: len(words)] == words
                and similarity(n, entry.name) >= SUGGESTION_FLOOR
            ):
                hits.append(key)
                break
    return hits[0] if len(hits) == 1 else None
