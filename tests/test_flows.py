import json
from types import SimpleNamespace
from unittest import mock

import pytest
import requests

from wedly.errors import AppError, ConfigurationError
from wedly.firebase_service import firestore_service
from wedly.flows import (
    FlowError,
    ask_wedding_assistant,
    budget_allocation_suggestions,
    generate_image,
    generate_vows,
    parse_allocations,
    seating_chart_suggestions,
    unsplash_image_search,
)
from wedly.flows.budget_allocation import BudgetAllocationOutput
from wedly.flows.seating_chart import SeatingChartOutput
from wedly.flows.vow_generator import VowGeneratorOutput
from wedly.flows.wedding_assistant import FALLBACK_ANSWER, build_tools


@pytest.fixture
def genai(monkeypatch):
    """The Gemini client, with generate_content mocked."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    client = mock.MagicMock(name="genai.Client")
    with mock.patch("wedly.flows.base.get_genai_client", return_value=client):
        yield client.models.generate_content


class TestVows:
    def test_returns_parsed_output(self, genai):
        genai.return_value = SimpleNamespace(parsed=VowGeneratorOutput(vows="I promise..."), text=None)

        output = generate_vows({"partnerName": "James", "keyMemories": "Our first hike", "tone": "romantic"})

        assert output.vows == "I promise..."
        prompt = genai.call_args.kwargs["contents"]
        assert "James" in prompt
        assert "romantic tone" in prompt
        config = genai.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"

    def test_falls_back_to_json_text(self, genai):
        genai.return_value = SimpleNamespace(parsed=None, text=json.dumps({"vows": "Always."}))

        output = generate_vows({"partnerName": "James", "keyMemories": "Paris", "tone": "humorous"})

        assert output.vows == "Always."

    def test_rejects_unknown_tone(self, genai):
        with pytest.raises(AppError) as excinfo:
            generate_vows({"partnerName": "James", "keyMemories": "Paris", "tone": "angry"})

        assert excinfo.value.status_code == 400
        genai.assert_not_called()

    def test_empty_model_output(self, genai):
        genai.return_value = SimpleNamespace(parsed=None, text="")

        with pytest.raises(FlowError):
            generate_vows({"partnerName": "James", "keyMemories": "Paris", "tone": "sentimental"})

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

        with pytest.raises(ConfigurationError):
            generate_vows({"partnerName": "James", "keyMemories": "Paris", "tone": "traditional"})


class TestBudgetAllocation:
    def test_parse_allocations_strips_currency(self):
        items = parse_allocations(json.dumps({"Venue": "$12,000", "Catering": 9500, "Flowers": "n/a"}))

        assert [(i.name, i.value) for i in items] == [
            ("Venue", 12000.0),
            ("Catering", 9500.0),
            ("Flowers", 0.0),
        ]

    def test_parse_allocations_rejects_invalid_json(self):
        with pytest.raises(FlowError):
            parse_allocations("Venue: lots")

    def test_prompt_lists_categories(self, genai):
        allocations = json.dumps({"Venue": 15000, "Catering": 10000})
        genai.return_value = SimpleNamespace(
            parsed=BudgetAllocationOutput(suggested_allocations=allocations), text=None
        )

        output = budget_allocation_suggestions({"totalBudget": 40000, "priorityItems": "photography, food"})

        assert json.loads(output.suggested_allocations)["Venue"] == 15000
        prompt = genai.call_args.kwargs["contents"]
        assert "Wedding Favors" in prompt
        assert "photography, food" in prompt
        assert output.model_dump(by_alias=True) == {"suggestedAllocations": allocations}

    def test_requires_positive_budget(self, genai):
        with pytest.raises(AppError):
            budget_allocation_suggestions({"totalBudget": 0})


class TestSeatingChart:
    def test_groups_guests(self, genai):
        chart = SeatingChartOutput(seating_chart=[{"table": 1, "guests": ["Charlotte", "Henry"]}])
        genai.return_value = SimpleNamespace(parsed=chart, text=None)

        output = seating_chart_suggestions({
            "guests": [{"name": "Charlotte", "group": "Family"}, {"name": "Henry", "group": "Family"}],
            "tables": 2,
            "guestsPerTable": 8,
        })

        assert output.seating_chart[0].guests == ["Charlotte", "Henry"]
        assert "Charlotte (Family)" in genai.call_args.kwargs["contents"]

    def test_requires_guests(self, genai):
        with pytest.raises(AppError):
            seating_chart_suggestions({"guests": [], "tables": 2, "guestsPerTable": 8})


class TestImageGenerator:
    def _response(self, *parts):
        return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])

    def test_returns_data_uri(self, genai):
        genai.return_value = self._response(
            SimpleNamespace(inline_data=None, text="Here is your image"),
            SimpleNamespace(inline_data=SimpleNamespace(data=b"\x89PNG", mime_type="image/png")),
        )

        output = generate_image({"prompt": "Rustic barn reception"})

        assert output.image == "data:image/png;base64,iVBORw=="

    def test_no_image_part(self, genai):
        genai.return_value = self._response(SimpleNamespace(inline_data=None, text="No can do"))

        with pytest.raises(FlowError):
            generate_image({"prompt": "Rustic barn reception"})


class TestUnsplashSearch:
    def test_blank_query_returns_nothing(self):
        with mock.patch("wedly.flows.unsplash_search.requests.get") as get:
            output = unsplash_image_search({"query": "   "})

        assert output.images == []
        get.assert_not_called()

    def test_missing_access_key(self, monkeypatch):
        monkeypatch.delenv("UNSPLASH_ACCESS_KEY", raising=False)

        with pytest.raises(ConfigurationError):
            unsplash_image_search({"query": "beach wedding"})

    def test_search(self, monkeypatch):
        monkeypatch.setenv("UNSPLASH_ACCESS_KEY", "unsplash-key")
        response = mock.Mock(status_code=200)
        response.json.return_value = {"results": [{
            "id": "abc",
            "alt_description": "beach wedding arch",
            "urls": {"regular": "https://images.unsplash.com/abc?w=1080", "thumb": "https://images.unsplash.com/abc?w=200"},
            "user": {"name": "Ana"},
        }]}

        with mock.patch("wedly.flows.unsplash_search.requests.get", return_value=response) as get:
            output = unsplash_image_search({"query": "beach wedding"})

        params = get.call_args.kwargs["params"]
        assert params == {"query": "beach wedding", "per_page": 20, "orientation": "squarish"}
        assert get.call_args.kwargs["headers"] == {"Authorization": "Client-ID unsplash-key"}
        image = output.model_dump(by_alias=True)["images"][0]
        assert image["alt_description"] == "beach wedding arch"
        assert image["urls"]["thumb"].endswith("w=200")
        assert image["user"]["name"] == "Ana"

    def test_api_error(self, monkeypatch):
        monkeypatch.setenv("UNSPLASH_ACCESS_KEY", "unsplash-key")
        response = mock.Mock(status_code=401, text="OAuth error: The access token is invalid")

        with mock.patch("wedly.flows.unsplash_search.requests.get", return_value=response):
            with pytest.raises(FlowError):
                unsplash_image_search({"query": "beach wedding"})

    def test_network_error(self, monkeypatch):
        monkeypatch.setenv("UNSPLASH_ACCESS_KEY", "unsplash-key")

        with mock.patch("wedly.flows.unsplash_search.requests.get",
                        side_effect=requests.ConnectionError("down")):
            with pytest.raises(FlowError) as excinfo:
                unsplash_image_search({"query": "beach wedding"})

        assert excinfo.value.status_code == 503


class TestWeddingAssistant:
    def test_tools_read_the_bound_user(self):
        with mock.patch.object(firestore_service, "get_budget_summary",
                               return_value={"total": 40000, "spent": 15800}) as budget, \
                mock.patch.object(firestore_service, "guest_rsvp_counts",
                                  return_value={"Confirmed": 4, "Pending": 2, "Declined": 1}), \
                mock.patch.object(firestore_service, "list_incomplete_tasks", return_value=[
                    {"title": "Hire a caterer", "completed": False},
                ]), \
                mock.patch.object(firestore_service, "list_tasks") as list_tasks:
            get_budget_status, get_guest_list_summary, get_upcoming_tasks = build_tools("user_olivia")

            assert get_budget_status() == {"totalBudget": 40000, "totalSpent": 15800, "remainingBudget": 24200}
            assert get_guest_list_summary() == {"totalGuests": 7, "confirmed": 4, "pending": 2, "declined": 1}
            assert get_upcoming_tasks() == {"upcomingTasks": [{"title": "Hire a caterer"}]}
            budget.assert_called_once_with("user_olivia")
            list_tasks.assert_not_called()

    def test_task_tool_queries_incomplete_tasks_without_seeding(self, fake_db):
        tasks = fake_db.collection.return_value.document.return_value.collection.return_value
        incomplete = tasks.where.return_value
        incomplete.stream.return_value = []

        get_upcoming_tasks = build_tools("user_olivia")[2]

        assert get_upcoming_tasks() == {"upcomingTasks": []}
        tasks.where.assert_called_once_with("completed", "==", False)
        fake_db.batch.assert_not_called()

    def test_answers_with_model_text(self, genai):
        genai.return_value = SimpleNamespace(text="You have $24,200 left in your budget!")

        output = ask_wedding_assistant({"question": "How much budget is left?", "userId": "user_olivia"})

        assert output.answer == "You have $24,200 left in your budget!"
        config = genai.call_args.kwargs["config"]
        assert "Welly" in config.system_instruction

    def test_fallback_answer(self, genai):
        genai.return_value = SimpleNamespace(text=None)

        output = ask_wedding_assistant({"question": "Hello?", "userId": "user_olivia"})

        assert output.answer == FALLBACK_ANSWER
