"""Pytest configuration for the translator property tests.

Profiles are picked with HYPOTHESIS_PROFILE: "ci" for the full run, "quick"
while iterating on the param-shaping rules, "dev" to see every generated body.
Without it the Hypothesis defaults apply.
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,  # Disable deadline in CI to avoid flaky tests
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "dev",
    max_examples=50,
    deadline=None,
    verbosity=Verbosity.verbose,
)

settings.register_profile(
    "quick",
    max_examples=10,
    deadline=None,
    phases=[Phase.generate],  # Skip shrinking for faster runs
)

# Load profile from environment variable if set
_profile = os.environ.get("HYPOTHESIS_PROFILE", "default")
if _profile in ("ci", "dev", "quick"):
    settings.load_profile(_profile)


def pytest_collection_modifyitems(config, items):
    """Automatically mark property tests with the 'property' marker."""
    for item in items:
        if "property" in str(item.fspath):
            item.add_marker(pytest.mark.property)
