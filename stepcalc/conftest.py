import os

import pytest
from fastapi.testclient import TestClient

from stepcalc.api import app
from stepcalc.shell import Shell


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def shell():
    return Shell()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove STEPCALC_* variables and keep .env files out of reach."""
    for key in list(os.environ):
        if key.startswith("STEPCALC_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr("stepcalc.config.load_dotenv", lambda *args, **kwargs: False)
    return monkeypatch


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        print(f"TEST: {item.name} - {'PASSED' if report.passed else 'FAILED'}")
