"""Shared fixtures for core unit tests"""

import pytest

from mdctx.core.models import Block


def _make_block(identity: str, text: str, target: str = "out.py", **kwargs) -> Block:
    return Block(identity=identity, language="python", target_path=target, raw_text=text, **kwargs)


@pytest.fixture(name="make_block")
def make_block_fixture():
    """Factory for Blocks tangled into out.py unless another target is given."""
    return _make_block


@pytest.fixture(name="abcd")
def abcd_fixture():
    """Four blocks A..D tangled into out.py, in document order."""
    return [_make_block(name, f"{name.lower()} = {i}\n") for i, name in enumerate("ABCD")]
