"""Tests for the journey router.

These tests verify:
1. journey() returns the app with every step bound
2. The request-bound journey is attached for every request
3. Session providers and the no-session fallback
4. Startup configuration errors
5. Not-found and server-error pages
"""

import importlib

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.testclient import TestClient

from conftest import body_lines
from formjourney import (
    CatalogContentResolver,
    ConfigurationError,
    RequestBoundJourney,
    Step,
    journey,
)
from formjourney import branch, goto, redirect_to
from formjourney.flow import StepRoute
from formjourney.forms import form, text
from formjourney.steps import AddAnother, Page, Question

journey_module = importlib.import_module("formjourney.flow.journey")
error_pages_module = importlib.import_module("formjourney.flow.error_pages")


class Inspect(Step):
    """Reports what the request-bound journey looks like."""

    def handle(self, ctx):
        bound = ctx.request.state.journey
        return JSONResponse(
            {
                "is_bound": isinstance(bound, RequestBoundJourney),
                "steps": sorted(step.name for step in bound),
                "has_session": bound.session is not None,
                "has_no_session_handler": bound.no_session_handler is not None,
                "inspect_url": bound.url_for("Inspect"),
            }
        )


class Explode(Step):
    def handle(self, ctx):
        raise RuntimeError("boom")


def _name_question():
    return Question("Name", form(name=text), next="Done", path="/name")


# =============================================================================
# Router
# =============================================================================


class TestJourneyRouter:
    def test_returns_app(self):
        app = FastAPI()
        result = journey(app, {"base_url": "http://testserver", "session": {"secret": "s"}})
        assert result is app

    def test_binds_every_step(self, make_client):
        client = make_client([Page("Start", path="/"), _name_question(), Page("Done", path="/done")])

        assert client.get("/").status_code == 200
        assert client.get("/name").status_code == 200
        assert client.get("/done").status_code == 200

    def test_stores_options_and_registry_on_app(self, make_app):
        start = Page("Start", path="/")
        app = make_app([start])

        assert app.state.journey_steps == {"Start": start}
        assert app.state.journey_options.base_url == "http://testserver"

    def test_attaches_request_bound_journey(self, make_client):
        client = make_client([Inspect("Inspect", path="/inspect"), Page("Start", path="/")])

        data = client.get("/inspect").json()

        assert data["is_bound"] is True
        assert data["steps"] == ["Inspect", "Start"]
        assert data["has_session"] is True
        assert data["has_no_session_handler"] is False
        assert data["inspect_url"] == "/inspect"

    def test_plain_routes_see_the_journey(self, make_app):
        app = make_app([Page("Start", path="/")])

        @app.get("/plain")
        async def plain(request: Request):
            bound = request.state.journey
            return {"start_path": bound["Start"].path, "has_start": "Start" in bound}

        client = TestClient(app)
        assert client.get("/plain").json() == {"start_path": "/", "has_start": True}

    def test_no_session_handler_is_exposed(self, make_client):
        client = make_client(
            [Inspect("Inspect", path="/inspect")],
            no_session_handler=lambda request: PlainTextResponse("no session"),
        )
        assert client.get("/inspect").json()["has_no_session_handler"] is True

    def test_step_routes_accept_every_method(self, make_app):
        app = make_app([Inspect("Inspect", path="/inspect"), Page("Start", path="/")])

        routes = [route for route in app.router.routes if isinstance(route, StepRoute)]

        assert [route.step.name for route in routes] == ["Inspect", "Start"]
        assert all(route.methods is None for route in routes)

    def test_post_reaches_the_step(self, make_client):
        client = make_client([Inspect("Inspect", path="/inspect")])

        resp = client.post("/inspect", data={"anything": "1"})

        assert resp.status_code == 200
        assert resp.json()["is_bound"] is True


# =============================================================================
# Sessions
# =============================================================================


class PresetSession:
    """ASGI middleware that attaches a fixed session to every request."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            scope["session"] = {"Name_name": "Preset"}
        await self.app(scope, receive, send)


class TestSessions:
    def test_session_provider_is_used(self, make_client):
        client = make_client(
            [_name_question(), Page("Done", path="/done")],
            session=lambda app: app.add_middleware(PresetSession),
        )
        assert body_lines(client.get("/name"))["name"] == "Preset"

    def test_configured_session_gets_default_cookie_domain(self, make_app, monkeypatch):
        installed = []
        monkeypatch.setattr(journey_module, "install_session", lambda app, opts: installed.append(opts))

        make_app([Page("Start", path="/")], base_url="https://apply.example.com", session={"secret": "s"})

        assert len(installed) == 1
        assert installed[0].session.cookie.domain == "apply.example.com"

    def test_no_session_handler_used_when_session_missing(self, make_client):
        client = make_client(
            [_name_question(), Page("Done", path="/done")],
            session=lambda app: None,
            no_session_handler=lambda request: PlainTextResponse("cookies required", status_code=400),
        )

        resp = client.get("/name")

        assert resp.status_code == 400
        assert resp.text == "cookies required"

    def test_async_no_session_handler(self, make_client):
        async def handler(request):
            return PlainTextResponse("async fallback", status_code=400)

        client = make_client(
            [_name_question(), Page("Done", path="/done")],
            session=lambda app: None,
            no_session_handler=handler,
        )

        assert client.get("/name").text == "async fallback"

    def test_missing_session_without_handler_is_server_error(self, make_client):
        client = make_client([_name_question(), Page("Done", path="/done")], session=lambda app: None)
        assert client.get("/name").status_code == 500

    def test_pages_work_without_session(self, make_client):
        client = make_client([Page("Start", path="/")], session=lambda app: None)
        assert client.get("/").status_code == 200


# =============================================================================
# Configuration Errors
# =============================================================================


class TestConfigurationErrors:
    def test_duplicate_step_names(self, make_app):
        with pytest.raises(ConfigurationError, match="Duplicate step name: Start"):
            make_app([Page("Start", path="/"), Page("Start", path="/again")])

    def test_rendering_steps_need_templates(self, make_app):
        with pytest.raises(ConfigurationError, match="no templates are configured"):
            make_app([Page("Start", path="/")], templates=None)

    def test_non_rendering_steps_need_no_templates(self, make_client):
        client = make_client([Inspect("Inspect", path="/inspect")], templates=None)
        assert client.get("/inspect").status_code == 200

    def test_missing_base_url(self):
        with pytest.raises(ConfigurationError, match="Must provide a base_url"):
            journey(FastAPI(), {"session": {"secret": "s"}})

    def test_question_without_next(self, make_app):
        question = Question("Name", form(name=text), path="/name")
        with pytest.raises(ConfigurationError, match="Step Name has no next step"):
            make_app([question])

    def test_add_another_without_next(self, make_app):
        with pytest.raises(ConfigurationError, match="Step Items has no next step"):
            make_app([AddAnother("Items", field=text, path="/items")])

    def test_next_names_unknown_step(self, make_app):
        question = Question("Name", form(name=text), next="Nowhere", path="/name")
        with pytest.raises(ConfigurationError, match="unknown step: Nowhere"):
            make_app([question])

    def test_branch_names_unknown_step(self, make_app):
        question = Question(
            "Name",
            form(name=text),
            next=branch(goto("Done").when(lambda ctx: False), goto("Nowhere")),
            path="/name",
        )
        with pytest.raises(ConfigurationError, match="unknown step: Nowhere"):
            make_app([question, Page("Done", path="/done")])

    def test_known_targets_and_urls_are_accepted(self, make_client):
        question = Question(
            "Name",
            form(name=text),
            next=branch(
                redirect_to("https://gov.example/exit").when(lambda ctx: False),
                goto("Done"),
            ),
            path="/name",
        )
        client = make_client([question, Page("Done", path="/done")])

        resp = client.post("/name", data={"name": "Ada"}, follow_redirects=False)

        assert resp.headers["location"] == "/done"


# =============================================================================
# Error Pages
# =============================================================================


class TestErrorPages:
    def test_not_found_plain(self, make_client):
        resp = make_client([Page("Start", path="/")]).get("/nowhere")

        assert resp.status_code == 404
        assert resp.text == "If you typed the web address, check it is correct."

    def test_not_found_template(self, make_client):
        client = make_client(
            [Page("Start", path="/")],
            error_pages={
                "not_found": {"template": "not_found.html", "title": "Missing", "message": "Gone"}
            },
        )

        resp = client.get("/nowhere")

        assert resp.status_code == 404
        assert resp.text.strip() == "404: Missing"

    def test_server_error(self, make_client):
        resp = make_client([Explode("Explode", path="/explode")]).get("/explode")

        assert resp.status_code == 500
        assert resp.text == "Please try again in a few minutes."

    def test_error_pages_bound_with_options(self, make_app, monkeypatch):
        bound = []
        monkeypatch.setattr(error_pages_module, "bind", lambda app, opts, templates: bound.append(opts))

        make_app([Page("Start", path="/")])

        assert len(bound) == 1
        assert bound[0].not_found.title == "Page not found"


# =============================================================================
# Content
# =============================================================================


class TestContent:
    def test_step_content_rendered(self, make_client):
        client = make_client(
            [Page("Greeting", path="/greeting")],
            content=CatalogContentResolver({"Greeting": {"title": "Hello there"}}),
        )
        assert client.get("/greeting").text.strip() == "Hello there"

    def test_missing_content_is_server_error(self, make_client):
        client = make_client([Page("Greeting", path="/greeting")], content=CatalogContentResolver({}))
        assert client.get("/greeting").status_code == 500

    def test_content_formatted_with_answers(self, make_client):
        greeting = Question("Greeting", form(name=text), next="Done", path="/greeting")
        client = make_client(
            [greeting, Page("Done", path="/done")],
            content=CatalogContentResolver({"Greeting": {"title": "Hello {name}"}}),
        )

        assert client.get("/greeting").text.strip() == "Hello {name}"
        client.post("/greeting", data={"name": "Ada"})
        assert client.get("/greeting").text.strip() == "Hello Ada"
