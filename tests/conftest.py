"""Pytest fixtures for scriptfsm tests."""

import pytest
from pathlib import Path


TEST_SCRIPT = '''
def fn1(src, dst, v):
    pass

def fn2(src, dst, v):
    return "foobar"

def fn3(src, dst):
    pass

def err1(src, dst, v):
    return error("an error occurred")

foo = [1, 2, 3]
'''

TRUTHY_SCRIPT = '''
def truthy(src, dst, v):
    return bool(v)

def falsy(src, dst, v):
    return not v
'''


@pytest.fixture
def examples_dir() -> Path:
    """Get path to examples directory."""
    return Path(__file__).parent.parent / "examples"


@pytest.fixture
def decimals_script(examples_dir: Path) -> str:
    """User script of the decimal number recognizer."""
    return (examples_dir / "decimals" / "decimals.py").read_text(encoding="utf-8")


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings isolated from the caller's environment and config files."""
    from scriptfsm.config.settings import FSMSettings

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SCRIPTFSM_CONFIG", raising=False)
    return FSMSettings(_env_file=None)


@pytest.fixture
def test_script() -> str:
    """Script with valid, wrong-arity, error-returning and non-callable exports."""
    return TEST_SCRIPT


@pytest.fixture
def truthy_script() -> str:
    return TRUTHY_SCRIPT


@pytest.fixture
def recorder():
    """Native callables that record every invocation in order."""
    calls = []

    def make(name, result=None):
        def fn(src, dst, v):
            calls.append((name, src, dst, v))
            return result

        return fn

    return calls, make
