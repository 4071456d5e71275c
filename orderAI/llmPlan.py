# Purpose: Call OpenAI to turn a free-text order ("large oat latte for Sam at 9")
# into an order plan, checked against planSchema.json and the OrderPlan model.
# The plan is only a request; resolving it against a storefront is the runner's job.

import json
from pathlib import Path
from typing import List, Optional

import pydantic
from jsonschema import ValidationError
from jsonschema import validate as jsonschema_validate
from openai import OpenAI

from orderAI.config import config
from orderAI.exceptions import PlanGenerationError
from orderAI.logging_config import get_logger
from orderAI.models import OrderPlan

logger = get_logger(__name__)

ROOT = Path(__file__).resolve().parent
SCHEMA_PATH = ROOT / "planSchema.json"

SYSTEM_PROMPT = """Convert café orders into strict JSON with this schema:
{
  "items":[{"name":"","size":"","modifiers":[],"qty":1}],
  "fulfillment":{"type":"pickup","time":""},
  "customer":{"name":"","phone":""},
  "payment":{"type":"card_test"}
}
Use the customer's words for item names unless a menu is given, then prefer menu names.
Respond ONLY with valid JSON. No markdown, code fences, or explanations."""


def load_schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def _build_user_prompt(query: str, menu_names: Optional[List[str]]) -> str:
    user = f"Order:\n{query}\n"
    if menu_names:
        user += "\nMenu (canonical item names):\n" + "\n".join(f"- {n}" for n in menu_names)
    return user


# Check raw model output: JSON object, schema-valid, and loadable as an OrderPlan.
def parse_plan(raw: str) -> dict:
    try:
        plan = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise PlanGenerationError(f"Model did not return JSON: {e}")
    if not isinstance(plan, dict):
        raise PlanGenerationError("Model returned JSON that is not an object.")
    try:
        jsonschema_validate(instance=plan, schema=load_schema())
    except ValidationError as ve:
        raise PlanGenerationError(f"Plan failed JSON Schema validation: {ve.message}")
    try:
        OrderPlan.model_validate(plan)
    except pydantic.ValidationError as e:
        raise PlanGenerationError(f"Plan is not a usable order: {e}")
    return plan


def generate_plan(query: str, menu_names: Optional[List[str]] = None, client: Optional[OpenAI] = None) -> dict:
    """Ask the LLM for an order plan for ``query`` and return it as a dict.

    ``menu_names`` steers item naming toward a merchant's catalog. Raises
    ``PlanGenerationError`` on a missing key, API failure or unusable output.
    """
    if not query or not query.strip():
        raise PlanGenerationError("Query is empty.")
    if client is None:
        try:
            config.validate_llm()
        except RuntimeError as e:
            raise PlanGenerationError(str(e))
        client = OpenAI(api_key=config.OPENAI_API_KEY)

    try:
        resp = client.chat.completions.create(
            model=config.OPENAI_MODEL,
            temperature=0,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _build_user_prompt(query, menu_names)},
            ],
        )
    except Exception as e:
        logger.exception("Plan generation request failed")
        raise PlanGenerationError(f"LLM request failed: {e}")

    plan = parse_plan(resp.choices[0].message.content)
    logger.info("Generated plan with %d item(s)", len(plan.get("items", [])))
    return plan


def write_plan(plan: dict, path: str = config.ORDER_PLAN_PATH) -> Path:
    p = Path(path)
    p.write_text(json.dumps(plan, indent=2), encoding="utf-8")
    return p


if __name__ == "__main__":
    # small manual test
    print("Writing plan for a demo order...")
    out = generate_plan("a medium chai tea latte with oat milk for pickup at 9:30, name Sam")
    write_plan(out)
    print(json.dumps(out, indent=2))
