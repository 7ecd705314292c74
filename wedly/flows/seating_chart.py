"""Seating chart suggestions grouped by guest affiliation."""
from typing import List

from pydantic import Field

from .base import CamelModel, Flow, generate_structured


class SeatingGuest(CamelModel):
    name: str = Field(min_length=1)
    group: str = ""


class SeatingChartInput(CamelModel):
    guests: List[SeatingGuest] = Field(min_length=1, description="The list of guests to be seated.")
    tables: int = Field(gt=0, description="The number of tables available.")
    guests_per_table: int = Field(gt=0, description="The maximum number of guests per table.")


class SeatingTable(CamelModel):
    table: int
    guests: List[str]


class SeatingChartOutput(CamelModel):
    seating_chart: List[SeatingTable] = Field(
        description="The suggested seating chart with guests assigned to tables."
    )


PROMPT = """You are an expert wedding planner specializing in creating harmonious seating charts.

You need to seat the following guests into {tables} tables, with a maximum of {guests_per_table} guests per table.

Guests list (with their group affiliation):
{guest_lines}

Your task is to create a seating chart that considers the guests' groups. Try to seat guests from the same group together, but also mix tables to encourage mingling where appropriate. Avoid leaving anyone isolated.

Return the seating arrangement as a JSON object adhering to the output schema.
"""


def _suggest(flow_input: SeatingChartInput) -> SeatingChartOutput:
    prompt = PROMPT.format(
        tables=flow_input.tables,
        guests_per_table=flow_input.guests_per_table,
        guest_lines="\n".join(
            f"- {guest.name} ({guest.group or 'no group'})" for guest in flow_input.guests
        ),
    )
    return generate_structured(prompt, SeatingChartOutput)


seating_chart_suggestions = Flow(
    "seatingChartSuggestionsFlow",
    SeatingChartInput,
    SeatingChartOutput,
    _suggest,
    premium=True,
)
