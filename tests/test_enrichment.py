"""Tests for the enrichment client and prompt rendering."""

import json

import httpx
import jinja2
import pytest

from attune.config import reload_config
from attune.contracts import (
    CollaboratorSignals,
    DirectiveSource,
    MeditationSummary,
    OnboardingProfile,
    UserState,
)
from attune.orchestrator import (
    compute_behavioral_gap,
    get_orchestrator,
    infer_context,
    run_cycle,
    run_pipeline,
    select_strategy,
)
from attune.providers import GroqClient, PromptLoader


def stages():
    state = UserState()
    context = infer_context(state)
    gap = compute_behavioral_gap(state)
    return state, context, gap, select_strategy(state, context, gap)


def completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_client(handler, api_key="test-key") -> GroqClient:
    return GroqClient(api_key=api_key, transport=httpx.MockTransport(handler))


class TestGroqClient:
    @pytest.mark.asyncio
    async def test_successful_enrichment(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            body = {"nudgeTitle": "Deep Breath", "rationale": "Stress is high"}
            return httpx.Response(200, json=completion(json.dumps(body)))

        client = make_client(handler)
        response = await client.enrich(*stages())
        await client.close()

        assert response.nudge_title == "Deep Breath"
        assert response.rationale == "Stress is high"

        request = requests[0]
        assert request.url.path.endswith("/chat/completions")
        assert request.headers["Authorization"] == "Bearer test-key"
        payload = json.loads(request.content)
        assert payload["response_format"] == {"type": "json_object"}
        assert [m["role"] for m in payload["messages"]] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_no_api_key_skips_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=completion("{}"))

        client = make_client(handler, api_key=None)
        assert await client.enrich(*stages()) is None
        assert calls == []

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        client = make_client(lambda request: httpx.Response(500, json={"error": "boom"}))
        with pytest.raises(httpx.HTTPStatusError):
            await client.enrich(*stages())
        await client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["not json", "[1, 2]"])
    async def test_malformed_content_raises(self, content):
        client = make_client(lambda request: httpx.Response(200, json=completion(content)))
        with pytest.raises(ValueError):
            await client.enrich(*stages())
        await client.close()

    @pytest.mark.asyncio
    async def test_missing_choices_raises(self):
        client = make_client(lambda request: httpx.Response(200, json={"id": "x"}))
        with pytest.raises(KeyError):
            await client.enrich(*stages())
        await client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"choices": []},
        [1, 2],
        {"choices": [{"message": None}]},
        {"choices": ["text"]},
        {"choices": [{"message": {"content": 5}}]},
    ])
    async def test_malformed_completion_raises(self, body):
        client = make_client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ValueError):
            await client.enrich(*stages())
        await client.close()

    @pytest.mark.asyncio
    async def test_empty_content_returns_none(self):
        client = make_client(lambda request: httpx.Response(200, json=completion("")))
        assert await client.enrich(*stages()) is None
        await client.close()

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "env-key")
        reload_config()
        assert GroqClient().api_key == "env-key"


class TestPipelineWithClient:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status, body", [
        (500, {"json": {"error": "boom"}}),
        (200, {"text": "<html>bad gateway</html>"}),
        (200, {"json": [1, 2]}),
        (200, {"json": {"id": "x"}}),
        (200, {"json": {"choices": []}}),
        (200, {"json": {"choices": [{"message": None}]}}),
        (200, {"json": completion("not json")}),
    ])
    async def test_bad_responses_keep_rules(self, state, now, status, body):
        client = make_client(lambda request: httpx.Response(status, **body))
        directive = await run_pipeline(state, client=client, now=now)
        await client.close()

        assert directive.source == DirectiveSource.RULES
        assert directive.nudge is not None

    @pytest.mark.asyncio
    async def test_server_error_keeps_rules(self, state, now):
        client = make_client(lambda request: httpx.Response(503))
        directive = await run_pipeline(state, client=client, now=now)
        await client.close()

        assert directive.source == DirectiveSource.RULES

    @pytest.mark.asyncio
    async def test_hybrid_directive(self, state, now):
        body = {"nudgeMessage": "One small step.", "healthMessage": "Sleep more."}
        client = make_client(lambda request: httpx.Response(200, json=completion(json.dumps(body))))
        directive = await run_pipeline(state, client=client, now=now)
        await client.close()

        assert directive.source == DirectiveSource.HYBRID
        assert directive.nudge.message == "One small step."
        assert directive.module_messages.health == "Sleep more."


class TestCycleEnrichment:
    def test_orchestrator_defaults_to_groq_client(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "env-key")
        reload_config()

        client = get_orchestrator("u").client
        assert isinstance(client, GroqClient)
        assert client.api_key == "env-key"

    @pytest.mark.asyncio
    async def test_run_cycle_enriches_with_key(self, state, now):
        body = {"nudgeTitle": "Deep Breath"}
        client = make_client(lambda request: httpx.Response(200, json=completion(json.dumps(body))))

        directive = await run_cycle(state, user_id="u", now=now, client=client)
        await client.close()

        assert directive.source == DirectiveSource.HYBRID
        assert directive.nudge.title == "Deep Breath"

    @pytest.mark.asyncio
    async def test_run_cycle_without_key_stays_rules(self, state, now):
        directive = await run_cycle(state, user_id="u", now=now)
        assert directive.source == DirectiveSource.RULES


class TestPrompts:
    def test_user_prompt_includes_metrics(self):
        profile = OnboardingProfile(goal_text="Finish my thesis")
        messages = GroqClient(api_key="k").build_messages(*stages(), profile=profile)

        system, user = messages[0]["content"], messages[1]["content"]
        assert "nudgeTitle" in system
        assert 'Core goal: "Finish my thesis"' in user
        assert "Mode: maintenance" in user
        assert "No meditation data" in user
        assert "No active focus goal set" in user

    def test_meditation_section(self):
        signals = CollaboratorSignals(meditation=MeditationSummary(session_count=3, total_minutes=12))
        user = GroqClient(api_key="k").build_messages(*stages(), signals=signals)[1]["content"]
        assert "Sessions: 3, 12 min total" in user

    def test_list_prompts(self):
        loader = PromptLoader()
        assert loader.list_prompts("enrichment") == ["system", "user"]
        assert loader.list_prompts("missing") == []

    def test_missing_template(self):
        with pytest.raises(jinja2.TemplateNotFound):
            PromptLoader().render("enrichment", "nope")
