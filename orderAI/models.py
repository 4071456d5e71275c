# Purpose: Typed views of the two JSON inputs (order plan, merchant config) and the
# per-run result objects. Plan and config models are frozen: the engine reads them,
# resolution artifacts live next to them, never inside them.

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderAI.exceptions import InputFileError


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


def _none_to_list(v: Any) -> Any:
    if v is None:
        return []
    if isinstance(v, list):
        return [x for x in v if x is not None]
    return v


def _none_to_dict(v: Any) -> Any:
    return {} if v is None else v


# Order plan

class OrderItem(_Frozen):
    name: str = ""
    size: Optional[str] = None
    modifiers: List[str] = Field(default_factory=list)
    qty: Optional[int] = None

    _lists = field_validator("modifiers", mode="before")(_none_to_list)

    # Zero or negative quantities still order the item once.
    @field_validator("qty")
    @classmethod
    def _at_least_one(cls, v: Optional[int]) -> Optional[int]:
        return None if v is None else max(v, 1)


class Fulfillment(_Frozen):
    type: Literal["pickup", "delivery"] = "pickup"
    time: Optional[str] = None


class Customer(_Frozen):
    name: Optional[str] = None
    phone: Optional[str] = None


class Payment(_Frozen):
    type: str = "card_test"


class OrderPlan(_Frozen):
    items: List[OrderItem] = Field(default_factory=list)
    fulfillment: Fulfillment = Field(default_factory=Fulfillment)
    customer: Customer = Field(default_factory=Customer)
    # Accepted for compatibility with generated plans; never acted on.
    payment: Optional[Payment] = None

    @field_validator("fulfillment", "customer", mode="before")
    @classmethod
    def _blank_sections(cls, v: Any) -> Any:
        return {} if v is None else v


# Merchant config

class MenuItem(_Frozen):
    name: str
    aliases: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    modifiers: List[str] = Field(default_factory=list)

    _lists = field_validator("aliases", "sizes", "modifiers", mode="before")(_none_to_list)


class Menu(_Frozen):
    items: List[MenuItem] = Field(default_factory=list)


class NormalizeRules(_Frozen):
    items: Dict[str, str] = Field(default_factory=dict)
    sizes: Dict[str, str] = Field(default_factory=dict)
    modifiers: Dict[str, str] = Field(default_factory=dict)

    _maps = field_validator("items", "sizes", "modifiers", mode="before")(_none_to_dict)


class Availability(_Frozen):
    out_of_stock: List[str] = Field(default_factory=list, alias="outOfStock")
    substitutions: Dict[str, List[str]] = Field(default_factory=dict)

    _lists = field_validator("out_of_stock", mode="before")(_none_to_list)
    _maps = field_validator("substitutions", mode="before")(_none_to_dict)


class Verification(_Frozen):
    summary_selector: Optional[str] = Field(default=None, alias="summarySelector")
    must_contain: List[str] = Field(default_factory=list, alias="mustContain")

    _lists = field_validator("must_contain", mode="before")(_none_to_list)


class CheckoutValues(_Frozen):
    name: Optional[str] = None
    phone: Optional[str] = None
    time: Optional[str] = None


class Checkout(_Frozen):
    defaults: CheckoutValues = Field(default_factory=CheckoutValues)
    fields: CheckoutValues = Field(default_factory=CheckoutValues)


class MerchantConfig(_Frozen):
    id: Optional[str] = None
    name: Optional[str] = None
    base_url: str = Field(alias="baseUrl")
    selectors: Dict[str, str] = Field(default_factory=dict)
    normalize: NormalizeRules = Field(default_factory=NormalizeRules)
    menu: Menu = Field(default_factory=Menu)
    availability: Availability = Field(default_factory=Availability)
    verification: Verification = Field(default_factory=Verification)
    checkout: Checkout = Field(default_factory=Checkout)

    @field_validator("normalize", "menu", "availability", "verification", "checkout", mode="before")
    @classmethod
    def _blank_sections(cls, v: Any) -> Any:
        return {} if v is None else v


# Run results

@dataclass(frozen=True)
class ResolutionResult:
    key: Optional[str]
    suggestions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MissingItem:
    asked: str
    suggestions: List[str] = field(default_factory=list)


@dataclass
class ResolvedItem:
    """One plan item after resolution, kept beside (not inside) the plan."""

    asked: str
    key: str
    size: Optional[str] = None
    modifiers: List[str] = field(default_factory=list)
    # modifier as requested -> modifier actually clicked (substitute, original, or None)
    applied: Dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def canonical(self) -> str:
        return self.key.split(".", 1)[1]


@dataclass
class ExecutionOutcome:
    ok: bool
    verified: bool
    missing_items: List[MissingItem] = field(default_factory=list)
    verification_mismatches: List[str] = field(default_factory=list)
    resolved_items: List[ResolvedItem] = field(default_factory=list)
    log: List[str] = field(default_factory=list)

    def to_report(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "verified": self.verified,
            "missingItems": [
                {"asked": m.asked, "suggestions": list(m.suggestions)} for m in self.missing_items
            ],
            "verificationMismatches": list(self.verification_mismatches),
        }


# Loading
# Read a JSON input file and raise InputFileError (path-qualified) on any problem.

def _read_json(path: str, what: str) -> Any:
    p = Path(path)
    where = str(p.resolve())
    if not p.exists():
        raise InputFileError(f"{what} file not found", where)
    raw = p.read_text(encoding="utf-8")
    if not raw.strip():
        raise InputFileError(f"{what} file is empty", where)
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise InputFileError(f"{what} file is not valid JSON ({e})", where)


def load_plan(path: str) -> OrderPlan:
    data = _read_json(path, "plan")
    try:
        return OrderPlan.model_validate(data)
    except pydantic.ValidationError as e:
        raise InputFileError(f"plan file does not match the order schema ({e.error_count()} errors)", str(Path(path).resolve()))


def load_config(path: str) -> MerchantConfig:
    data = _read_json(path, "config")
    try:
        return MerchantConfig.model_validate(data)
    except pydantic.ValidationError as e:
        raise InputFileError(f"config file does not match the merchant schema ({e.error_count()} errors)", str(Path(path).resolve()))
