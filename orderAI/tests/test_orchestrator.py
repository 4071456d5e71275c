from __future__ import annotations

import pytest

from conftest import FakePage
from orderAI.exceptions import ConfigurationError, DriverTimeoutError
from orderAI.orchestrator import checkout_values, execute_plan


def test_single_item_click_sequence(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(summary="Order: Chai Tea Latte, Medium, Oat Milk")
    plan = plan_of({"name": "chai", "size": "Grande", "modifiers": ["oat"]})

    outcome = execute_plan(page, cafe, plan)

    assert page.calls[0] == ("goto", "http://cafe.test/menu")
    assert page.clicks == ["#chai", "#size-m", "#mod-oat", "#add", "#cart", "#checkout"]
    assert outcome.ok is True
    assert outcome.verified is True
    assert "[executor] Add medium chai tea latte (oat milk)" in outcome.log
    assert outcome.log[-2:] == ["[verify] RESULT: PASS", "✅ Reached checkout (stopping before payment)."]


def test_shortened_name_resolves_through_catalog(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(summary="chai tea latte")
    outcome = execute_plan(page, cafe, plan_of({"name": "chai tea"}))
    assert page.clicks[0] == "#chai"
    assert outcome.missing_items == []


def test_unresolved_item_is_skipped_and_run_continues(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(summary="cold brew")
    plan = plan_of({"name": "zzz-unknown-drink"}, {"name": "cold brew"})

    outcome = execute_plan(page, cafe, plan)

    assert page.clicks == ["#cold-brew", "#add", "#cart", "#checkout"]
    assert [m.asked for m in outcome.missing_items] == ["zzz-unknown-drink"]
    assert outcome.missing_items[0].suggestions == []
    assert outcome.ok is False
    assert "[verify] RESULT: FAIL" in outcome.log
    assert '[suggest] ITEM_NOT_FOUND: "zzz-unknown-drink" → suggestions: none' in outcome.log
    assert not any(line.startswith("[suggest] NOT_FOUND") for line in outcome.log)


def test_near_miss_logs_suggestions(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(summary="")
    outcome = execute_plan(page, cafe, plan_of({"name": "cold bruw"}))
    assert any(
        line.startswith('[suggest] NOT_FOUND: "cold bruw" → did you mean: cold brew')
        for line in outcome.log
    )
    assert any(
        line.startswith('[suggest] ITEM_NOT_FOUND: "cold bruw" → suggestions: cold brew')
        for line in outcome.log
    )


def test_out_of_stock_modifier_clicks_substitute(make_config, plan_of) -> None:  # type: ignore[no-untyped-def]
    cfg = make_config(availability={"outOfStock": ["oat milk"], "substitutions": {"oat milk": ["almond milk"]}})
    page = FakePage(summary="matcha latte, almond milk")

    outcome = execute_plan(page, cfg, plan_of({"name": "matcha", "modifiers": ["oat milk"]}))

    assert "#mod-almond" in page.clicks
    assert "#mod-oat" not in page.clicks
    assert "[executor] 'oat milk' OOS → using 'almond milk'" in outcome.log
    assert outcome.ok is True


def test_out_of_stock_without_substitute_is_skipped(make_config, plan_of) -> None:  # type: ignore[no-untyped-def]
    cfg = make_config(availability={"outOfStock": ["vanilla"]})
    page = FakePage(summary="cold brew vanilla")
    outcome = execute_plan(page, cfg, plan_of({"name": "cold brew", "modifiers": ["vanilla"]}))
    assert page.clicks == ["#cold-brew", "#add", "#cart", "#checkout"]
    assert "[executor] 'vanilla' OOS and no substitution; skipping" in outcome.log


def test_missing_size_and_modifier_selectors_are_soft_skips(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(summary="cold brew")
    plan = plan_of({"name": "cold brew", "size": "small", "modifiers": ["caramel", ""]})

    outcome = execute_plan(page, cafe, plan)

    assert page.clicks == ["#cold-brew", "#add", "#cart", "#checkout"]
    assert "[executor] No selector for size 'small', skipping size click" in outcome.log
    assert "[executor] No selector for modifier 'caramel', skipping" in outcome.log
    assert outcome.resolved_items[0].modifiers == ["caramel"]


def test_one_resolved_one_missing_fails_even_when_summary_matches(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(summary="order: cold brew")
    outcome = execute_plan(page, cafe, plan_of({"name": "cold brew"}, {"name": "pumpkin spice"}))
    assert outcome.verification_mismatches == []
    assert len(outcome.missing_items) == 1
    assert outcome.ok is False


def test_missing_checkout_button_aborts_before_any_action(make_config, cafe_dict, plan_of) -> None:  # type: ignore[no-untyped-def]
    selectors = {k: v for k, v in cafe_dict["selectors"].items() if k != "button.checkout"}
    cfg = make_config(selectors=selectors)
    page = FakePage()
    with pytest.raises(ConfigurationError):
        execute_plan(page, cfg, plan_of({"name": "cold brew"}))
    assert page.calls == []


def test_declared_checkout_field_must_exist(make_config, cafe_dict, plan_of) -> None:  # type: ignore[no-untyped-def]
    cfg = make_config(checkout={"fields": {"name": "field.fullName"}})
    page = FakePage()
    with pytest.raises(ConfigurationError) as exc:
        execute_plan(page, cfg, plan_of({"name": "cold brew"}))
    assert exc.value.key == "field.fullName"


def test_view_cart_is_optional(make_config, cafe_dict, plan_of) -> None:  # type: ignore[no-untyped-def]
    selectors = {k: v for k, v in cafe_dict["selectors"].items() if k != "button.viewCart"}
    page = FakePage(summary="cold brew")
    execute_plan(page, make_config(selectors=selectors), plan_of({"name": "cold brew"}))
    assert page.clicks == ["#cold-brew", "#add", "#checkout"]


def test_duplicates_and_quantity_each_add_to_cart(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(summary="cold brew")
    execute_plan(page, cafe, plan_of({"name": "cold brew", "qty": 2}, {"name": "cold brew"}))
    assert page.clicks.count("#add") == 3
    assert page.clicks.count("#cold-brew") == 3


def test_same_plan_twice_gives_same_clicks(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    plan = plan_of(
        {"name": "matcha", "size": "venti", "modifiers": ["almond", "vanilla"]},
        {"name": "nope nope"},
        {"name": "chai"},
    )
    first, second = FakePage(summary="x"), FakePage(summary="x")
    execute_plan(first, cafe, plan)
    execute_plan(second, cafe, plan)
    assert first.calls == second.calls


def test_checkout_fields_use_plan_then_defaults_then_fallback(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(summary="cold brew")
    plan = plan_of({"name": "cold brew"}, customer={"name": "Sam"}, fulfillment={"type": "pickup"})

    execute_plan(page, cafe, plan)

    assert page.fills == {"#f-name": "Sam", "#f-phone": "555-7777", "#f-time": "12:30"}
    assert checkout_values(cafe, plan) == {"name": "Sam", "phone": "555-7777", "time": "12:30"}


def test_unconfigured_checkout_fields_are_not_filled(make_config, cafe_dict, plan_of) -> None:  # type: ignore[no-untyped-def]
    selectors = {k: v for k, v in cafe_dict["selectors"].items() if k != "field.phone"}
    page = FakePage(summary="cold brew")
    execute_plan(page, make_config(selectors=selectors), plan_of({"name": "cold brew"}))
    assert set(page.fills) == {"#f-name", "#f-time"}


def test_driver_timeout_propagates(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(hidden=("#add",))
    with pytest.raises(DriverTimeoutError):
        execute_plan(page, cafe, plan_of({"name": "cold brew"}))


def test_summary_read_once_after_all_actions(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(summary="cold brew")
    execute_plan(page, cafe, plan_of({"name": "cold brew"}))
    reads = [i for i, c in enumerate(page.calls) if c[0] == "read"]
    assert reads == [len(page.calls) - 1]


def test_echo_receives_every_line(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    seen: list[str] = []
    outcome = execute_plan(FakePage(summary="cold brew"), cafe, plan_of({"name": "cold brew"}), echo=seen.append)
    assert seen == outcome.log


def test_plan_is_not_mutated(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    plan = plan_of({"name": "Matcha", "size": "Grande", "modifiers": ["Oat"]})
    before = plan.model_dump()
    execute_plan(FakePage(summary=""), cafe, plan)
    assert plan.model_dump() == before


def test_sloppy_item_still_orders_once(cafe, plan_of) -> None:  # type: ignore[no-untyped-def]
    page = FakePage(summary="cold brew vanilla")
    outcome = execute_plan(page, cafe, plan_of({"name": "cold brew", "qty": 0, "modifiers": [None, "vanilla", ""]}))
    assert page.clicks == ["#cold-brew", "#mod-vanilla", "#add", "#cart", "#checkout"]
    assert outcome.ok is True
