"""
Conversational assistant ("Welly") that answers questions about the caller's
own plan. Gemini calls the tool functions below through automatic function
calling; every tool is bound to the verified uid so the model never chooses
whose data it reads.
"""
import logging
from typing import Any, Callable, Dict, List

from pydantic import Field

from ..constants import TEXT_MODEL
from ..firebase_service import firestore_service
from .base import CamelModel, Flow, generate_content

logger = logging.getLogger("wedly")

FALLBACK_ANSWER = "Sorry, I encountered an error while trying to respond. Please try again."

SYSTEM_PROMPT = """You are a helpful and friendly wedding planning assistant. Your name is Welly.
Use the available tools to answer the user's questions about their wedding plan.
The tools already know who the user is. Do not ask the user for their ID.
Provide clear, concise, and friendly answers.
If you don't have the information, say so politely.
Always refer to yourself in the first person (e.g., "I can help with that!")."""


class WeddingAssistantInput(CamelModel):
    question: str = Field(min_length=1, max_length=2000,
                          description="The user's question about their wedding plan.")
    user_id: str = Field(min_length=1, description="The ID of the user asking the question.")


class WeddingAssistantOutput(CamelModel):
    answer: str = Field(description="The AI assistant's answer to the user's question.")


def build_tools(user_id: str) -> List[Callable[[], Dict[str, Any]]]:
    """Tool functions closed over user_id."""

    def get_budget_status() -> Dict[str, float]:
        """Returns the current budget status, including total budget, amount spent, and remaining budget."""
        summary = firestore_service.get_budget_summary(user_id)
        return {
            "totalBudget": summary["total"],
            "totalSpent": summary["spent"],
            "remainingBudget": summary["total"] - summary["spent"],
        }

    def get_guest_list_summary() -> Dict[str, int]:
        """Returns a summary of the guest list, including RSVP counts."""
        counts = firestore_service.guest_rsvp_counts(user_id)
        return {
            "totalGuests": sum(counts.values()),
            "confirmed": counts["Confirmed"],
            "pending": counts["Pending"],
            "declined": counts["Declined"],
        }

    def get_upcoming_tasks() -> Dict[str, List[Dict[str, str]]]:
        """Returns a list of incomplete tasks."""
        tasks = firestore_service.list_incomplete_tasks(user_id)
        return {"upcomingTasks": [{"title": task.get("title", "")} for task in tasks]}

    return [get_budget_status, get_guest_list_summary, get_upcoming_tasks]


def _ask(flow_input: WeddingAssistantInput) -> WeddingAssistantOutput:
    from google.genai import types

    config = types.GenerateContentConfig(
        system_instruction=SYSTEM_PROMPT,
        tools=build_tools(flow_input.user_id),
    )
    response = generate_content(TEXT_MODEL, flow_input.question, config)

    answer = (getattr(response, "text", None) or "").strip()
    if not answer:
        logger.warning(f"[ASSISTANT] Empty answer for user {flow_input.user_id}")
        answer = FALLBACK_ANSWER
    return WeddingAssistantOutput(answer=answer)


ask_wedding_assistant = Flow(
    "weddingAssistantFlow",
    WeddingAssistantInput,
    WeddingAssistantOutput,
    _ask,
)
