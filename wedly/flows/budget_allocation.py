"""Budget allocation suggestions across the standard wedding categories."""
import json
import re
from typing import List, Optional

from pydantic import Field

from ..constants import BUDGET_CATEGORIES
from .base import CamelModel, Flow, FlowError, generate_structured


class ExpenseLine(CamelModel):
    category: str
    actual: float = 0
    vendor: str = ""


class BudgetAllocationInput(CamelModel):
    total_budget: float = Field(gt=0, description="The total budget for the wedding.")
    priority_items: str = Field(
        default="",
        description="A comma separated list of items the user wants to prioritize for their wedding.",
    )
    current_expenses: Optional[List[ExpenseLine]] = Field(
        default=None,
        description="Expenses already committed, so suggestions can work around them.",
    )


class BudgetAllocationOutput(CamelModel):
    suggested_allocations: str = Field(
        description="A JSON string of suggested budget allocations for various wedding categories."
    )


class BudgetItem(CamelModel):
    name: str
    value: float


PROMPT = """You are a wedding planning assistant that helps couples allocate their budget.

Based on the total budget and priority items from the user, provide estimated budget allocations for the following categories:

{categories}

Total Budget: {total_budget}
Priority Items: {priority_items}
{expenses}
Return the allocations as a JSON string mapping each category to an amount.
"""

_NUMBER_CLEANUP = re.compile(r"[^0-9.\-]+")


def parse_allocations(suggested_allocations: str) -> List[BudgetItem]:
    """Turn the model's JSON string into chart items, stripping currency formatting."""
    try:
        allocations = json.loads(suggested_allocations)
    except json.JSONDecodeError as e:
        raise FlowError(f"Budget suggestions were not valid JSON: {e}") from e
    if not isinstance(allocations, dict):
        raise FlowError("Budget suggestions must be a JSON object")

    items = []
    for name, value in allocations.items():
        cleaned = _NUMBER_CLEANUP.sub("", str(value))
        try:
            amount = float(cleaned) if cleaned else 0.0
        except ValueError:
            amount = 0.0
        items.append(BudgetItem(name=name, value=amount))
    return items


def _suggest(flow_input: BudgetAllocationInput) -> BudgetAllocationOutput:
    expenses = ""
    if flow_input.current_expenses:
        lines = "\n".join(
            f"- {e.category}: {e.actual:.2f} ({e.vendor or 'no vendor'})"
            for e in flow_input.current_expenses
        )
        expenses = f"\nExpenses already committed:\n{lines}\n"
    prompt = PROMPT.format(
        categories="\n".join(f"- {category}" for category in BUDGET_CATEGORIES),
        total_budget=flow_input.total_budget,
        priority_items=flow_input.priority_items or "none given",
        expenses=expenses,
    )
    output = generate_structured(prompt, BudgetAllocationOutput)
    # Fail early on unusable JSON rather than handing it to the client
    parse_allocations(output.suggested_allocations)
    return output


budget_allocation_suggestions = Flow(
    "budgetAllocationSuggestionsFlow",
    BudgetAllocationInput,
    BudgetAllocationOutput,
    _suggest,
    premium=True,
)
