"""
Test fixtures for formjourney.

Provides a templates directory with one small template per test step, a
session provider that needs no cookie domain, and factories for journey apps
and test clients.
"""

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.middleware.sessions import SessionMiddleware

_repo_root = Path(__file__).parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

from formjourney import journey  # noqa: E402

# ============================================================================
# Templates
# ============================================================================

# Templates print the state under test as plain "key=value" lines.
TEMPLATES: Dict[str, str] = {
    "Start.html": "start page\n",
    "Name.html": (
        "name={{ (fields['name'].value or '') if fields else '' }}\n"
        "errors={{ errors.keys() | sort | join(',') }}\n"
        "messages={{ errors.values() | sort | join('|') }}\n"
        "post={{ post_url }}\n"
    ),
    "Items.html": (
        "mode={{ mode }}\n"
        "index={{ index }}\n"
        "{% if 'items' in fields %}items={{ fields['items'].value | join(',') }}{% endif %}\n"
        "{% if 'item' in fields %}item={{ fields['item'].value or '' }}{% endif %}\n"
        "errors={{ errors.keys() | sort | join(',') }}\n"
        "messages={{ errors.values() | sort | join('|') }}\n"
        "post={{ post_url }}\n"
        "add={{ add_another_url }}\n"
    ),
    "Done.html": "done\n",
    "Greeting.html": "{{ content.title }}\n",
    "not_found.html": "{{ status_code }}: {{ title }}\n",
}


@pytest.fixture
def templates_dir(tmp_path) -> Path:
    """Create a templates directory with every test template."""
    directory = tmp_path / "templates"
    directory.mkdir()
    for name, body in TEMPLATES.items():
        (directory / name).write_text(body)
    return directory


# ============================================================================
# Sessions
# ============================================================================


def cookie_session(app: FastAPI) -> None:
    """Session provider without a cookie domain, so TestClient keeps the cookie."""
    app.add_middleware(SessionMiddleware, secret_key="test-secret")


@pytest.fixture
def session_provider() -> Callable[[FastAPI], None]:
    return cookie_session


# ============================================================================
# Apps and Clients
# ============================================================================


@pytest.fixture
def make_app(templates_dir, session_provider) -> Callable[..., FastAPI]:
    """Return a factory building a journey app around ``steps``."""

    def factory(steps: List[Any], **options: Any) -> FastAPI:
        opts: Dict[str, Any] = {
            "base_url": "http://testserver",
            "session": session_provider,
            "steps": steps,
            "templates": templates_dir,
        }
        opts.update(options)
        return journey(FastAPI(), opts)

    return factory


@pytest.fixture
def make_client(make_app) -> Callable[..., TestClient]:
    def factory(steps: List[Any], **options: Any) -> TestClient:
        return TestClient(make_app(steps, **options), raise_server_exceptions=False)

    return factory


def body_lines(response) -> Dict[str, str]:
    """Parse a "key=value" template response into a dict."""
    lines: Dict[str, str] = {}
    for line in response.text.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            lines[key] = value
    return lines
