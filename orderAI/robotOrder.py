# Purpose: Command-line runner. Loads an order plan and a merchant config, drives
# the storefront in a real browser, prints the execution log line by line and ends
# with a one-line JSON report the API can parse.
#
#   order-robot --plan .last-plan.json --config merchant-configs/asaply-demo.json
#
# Exit codes: 0 run completed (PASS or FAIL), 1 fatal run error, 2 unusable input.

import argparse
import json
import sys
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from orderAI.config import config
from orderAI.driver import launch_browser
from orderAI.exceptions import AppException, InputFileError
from orderAI.logging_config import get_logger, setup_logging
from orderAI.models import ExecutionOutcome, MerchantConfig, OrderPlan, load_config, load_plan
from orderAI.orchestrator import execute_plan, preflight

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="order-robot",
        description="Place an order plan on a merchant storefront (stops before payment).",
    )
    parser.add_argument("--plan", default=config.ORDER_PLAN_PATH, help="path to the order plan JSON")
    parser.add_argument("--config", default=config.ORDER_CONFIG_PATH, help="path to the merchant config JSON")
    return parser.parse_args(argv)


def run_order(plan: OrderPlan, merchant: MerchantConfig) -> ExecutionOutcome:
    # Fail on a broken config before a browser window is opened.
    preflight(merchant)
    with sync_playwright() as pw:
        with launch_browser(pw) as page:
            outcome = execute_plan(page, merchant, plan, echo=print)
            print(json.dumps(outcome.to_report(), ensure_ascii=False))
            return outcome


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging()
    try:
        config.validate()
        plan = load_plan(args.plan)
        merchant = load_config(args.config)
    except (InputFileError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(f"[executor] Plan file: {args.plan}")
    print(f"[executor] Config file: {args.config}")
    try:
        run_order(plan, merchant)
    except AppException as e:
        logger.error("Run aborted: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except PlaywrightError as e:
        logger.exception("Browser failure")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
