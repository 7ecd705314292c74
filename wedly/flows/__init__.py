from .base import CamelModel, Flow, FlowError
from .budget_allocation import budget_allocation_suggestions, parse_allocations
from .image_generator import generate_image
from .seating_chart import seating_chart_suggestions
from .unsplash_search import unsplash_image_search
from .vow_generator import generate_vows
from .wedding_assistant import ask_wedding_assistant

# URL slug -> flow, for /api/flows/<slug>
FLOWS = {
    "vows": generate_vows,
    "budget-suggestions": budget_allocation_suggestions,
    "seating-chart": seating_chart_suggestions,
    "image": generate_image,
    "unsplash-search": unsplash_image_search,
}

__all__ = [
    "CamelModel",
    "Flow",
    "FlowError",
    "FLOWS",
    "ask_wedding_assistant",
    "budget_allocation_suggestions",
    "generate_image",
    "generate_vows",
    "parse_allocations",
    "seating_chart_suggestions",
    "unsplash_image_search",
]
