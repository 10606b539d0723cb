# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Decision context isolation across real requests."""

import logging
import threading
from contextlib import asynccontextmanager

import anyio.to_thread
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.middleware import EffectiveFilterCleanupMiddleware
from src.rbac import context
from src.rbac.filters import EffectiveFilter


@asynccontextmanager
async def single_worker_thread(app: FastAPI):
    anyio.to_thread.current_default_thread_limiter().total_tokens = 1
    yield


def build_app() -> FastAPI:
    app = FastAPI(lifespan=single_worker_thread)
    app.add_middleware(EffectiveFilterCleanupMiddleware)

    @app.get("/sync-leak")
    def sync_leak() -> dict:
        seen = context.get_effective_filter()
        context.set_decision(EffectiveFilter.ALL, None)
        return {
            "seen": seen.value if seen else None,
            "thread": threading.get_ident(),
        }

    @app.get("/async-leak")
    async def async_leak() -> dict:
        context.set_decision(EffectiveFilter.OWN, None)
        return {"ok": True}

    @app.get("/async-clean")
    async def async_clean() -> dict:
        with context.effective_filter_scope(EffectiveFilter.OWN, None):
            return {"ok": True}

    return app


@pytest.fixture
def app_client():
    with TestClient(build_app()) as test_client:
        yield test_client


def test_reused_worker_thread_starts_without_decision(app_client):
    first = app_client.get("/sync-leak").json()
    second = app_client.get("/sync-leak").json()

    assert first["thread"] == second["thread"]
    assert first["seen"] is None
    assert second["seen"] is None


def test_middleware_clears_decision_leaked_by_async_endpoint(app_client, caplog):
    with caplog.at_level(logging.WARNING, logger="src.api.middleware"):
        response = app_client.get("/async-leak")

    assert response.status_code == 200
    assert any(
        "/async-leak" in record.getMessage() and "clearing" in record.getMessage()
        for record in caplog.records
    )


def test_middleware_is_quiet_for_scoped_decisions(app_client, caplog):
    with caplog.at_level(logging.WARNING, logger="src.api.middleware"):
        response = app_client.get("/async-clean")

    assert response.status_code == 200
    assert caplog.records == []
