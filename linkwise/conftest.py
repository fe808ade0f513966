"""Pytest configuration and shared fixtures."""

import pytest


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--online",
        action="store_true",
        default=False,
        help="Run tests that require external connectivity (LinkedIn, OpenAI)",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "online: mark test as requiring external connectivity"
    )
    config.addinivalue_line("markers", "unit: fast tests with every collaborator mocked")
    config.addinivalue_line(
        "markers", "integration: tests that need a Postgres container"
    )


def pytest_collection_modifyitems(config, items):
    """Skip online tests if --online flag is not provided."""
    if config.getoption("--online"):
        return

    skip_online = pytest.mark.skip(reason="need --online option to run")
    for item in items:
        if "online" in item.keywords:
            item.add_marker(skip_online)
