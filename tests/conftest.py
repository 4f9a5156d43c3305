"""Pytest configuration and fixtures."""
import os
import textwrap

import pytest
from hypothesis import settings

# Hypothesis profiles
settings.register_profile("ci", max_examples=100)
settings.register_profile("dev", max_examples=10)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


ZONETOOLS_ENV_VARS = (
    "ZONETOOLS_DEFAULT_TTL",
    "ZONETOOLS_MAX_INCLUDE_DEPTH",
    "ZONETOOLS_ENCODING",
    "ZONETOOLS_LOG_LEVEL",
    "ZONETOOLS_DEBUG",
    "ZONETOOLS_CHECKZONE",
)


EXAMPLE_ZONE = """\
$TTL 3600
$ORIGIN example.com.
@       IN  SOA ns1.example.com. admin.example.com. (
                2024010101 ; serial
                7200       ; refresh
                3600       ; retry
                1209600    ; expire
                86400 )    ; minimum
        IN  NS  ns1.example.com.
        IN  A   192.0.2.1
www     IN  A   192.0.2.10
mail    IN  MX  10 mail.example.com.
mail    IN  A   192.0.2.20
"""


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every ZONETOOLS_* variable from the environment."""
    for name in ZONETOOLS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_zone(tmp_path):
    """Write zone text into tmp_path and return the file path as a string."""
    def _write(text: str, name: str = "example.com.zone") -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def example_zone(write_zone):
    return write_zone(EXAMPLE_ZONE)
