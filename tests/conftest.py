"""Shared fixtures for typed_response tests."""

from __future__ import annotations

import pytest

from typed_response import Registry, RegistryBuilder, register_core_decoders


@pytest.fixture
def registry() -> Registry:
    """A frozen registry with the bundled decoders."""
    return register_core_decoders(RegistryBuilder()).build()
