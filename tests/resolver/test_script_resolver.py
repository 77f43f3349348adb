"""Tests for the Python script resolver."""

import pytest

from scriptfsm.errors import CompileError, InvocationError
from scriptfsm.resolver.protocol import OutcomeKind, ProbeStatus
from scriptfsm.resolver.script import ScriptResolver


class TestProbe:
    """Tests for ScriptResolver.probe()."""

    def test_ok(self, test_script):
        result = ScriptResolver(test_script).probe("fn1")

        assert result.ok
        assert result.arity == 3
        assert result.to_error() is None

    def test_not_found(self, test_script):
        result = ScriptResolver(test_script).probe("fn4")

        assert result.status == ProbeStatus.NOT_FOUND
        assert str(result.to_error()) == "function 'fn4' not found"

    def test_not_callable(self, test_script):
        result = ScriptResolver(test_script).probe("foo")

        assert result.status == ProbeStatus.NOT_CALLABLE

    def test_wrong_arity(self, test_script):
        result = ScriptResolver(test_script).probe("fn3")

        assert result.status == ProbeStatus.WRONG_ARITY
        assert result.arity == 2

    def test_var_positional_passes(self):
        result = ScriptResolver("def any_args(*args):\n    pass\n").probe("any_args")

        assert result.ok
        assert result.arity is None

    def test_keyword_only_not_counted(self):
        script = "def fn(src, dst, v, *, verbose=False):\n    pass\n"

        assert ScriptResolver(script).probe("fn").ok

    def test_private_names_not_exported(self):
        script = "def _helper(src, dst, v):\n    pass\n"

        assert ScriptResolver(script).probe("_helper").status == ProbeStatus.NOT_FOUND

    def test_injected_helpers_not_exported(self):
        resolver = ScriptResolver("def fn(src, dst, v):\n    pass\n")

        assert resolver.names() == ["fn"]
        assert resolver.probe("error").status == ProbeStatus.NOT_FOUND

    def test_dunder_all_limits_exports(self):
        script = '''
__all__ = ["public"]

def public(src, dst, v):
    pass

def hidden(src, dst, v):
    pass
'''
        resolver = ScriptResolver(script)

        assert resolver.names() == ["public"]
        assert resolver.probe("hidden").status == ProbeStatus.NOT_FOUND

    def test_non_string_dunder_all_entries_ignored(self):
        script = '''
__all__ = ["fn", 1, None]

def fn(src, dst, v):
    pass
'''
        assert ScriptResolver(script).names() == ["fn"]

    def test_non_iterable_dunder_all(self):
        with pytest.raises(CompileError, match="TypeError"):
            ScriptResolver("__all__ = 5\n").names()

    def test_bytes_source(self):
        resolver = ScriptResolver(b"def fn(src, dst, v):\n    return 1\n")

        assert resolver.probe("fn").ok


class TestCompile:
    """Tests for compiling scripts."""

    def test_syntax_error(self):
        with pytest.raises(CompileError) as exc:
            ScriptResolver("def broken(:\n", filename="broken.py").compile()
        assert str(exc.value).startswith("failed to compile script")
        assert exc.value.context == {"filename": "broken.py"}

    def test_module_level_exception(self):
        with pytest.raises(CompileError) as exc:
            ScriptResolver("raise RuntimeError('nope')\n").compile()
        assert str(exc.value) == "script execution error: RuntimeError: nope"

    def test_blocked_import(self):
        with pytest.raises(CompileError, match="import of 'os' is not allowed"):
            ScriptResolver("import os\n").compile()

    def test_blocked_submodule_import(self):
        with pytest.raises(CompileError, match="not allowed"):
            ScriptResolver("from os import path\n").compile()

    @pytest.mark.parametrize("module", ["importlib", "builtins", "io", "_io", "ctypes", "posix"])
    def test_reexporting_modules_blocked(self, module):
        with pytest.raises(CompileError, match=f"import of '{module}' is not allowed"):
            ScriptResolver(f"import {module}\n").compile()

    def test_allowed_import(self):
        ScriptResolver("import math\n").compile()

    def test_custom_blocked_modules(self):
        ScriptResolver("import os\n", blocked_modules=[]).compile()
        with pytest.raises(CompileError):
            ScriptResolver("import json\n", blocked_modules=["json"]).compile()

    def test_removed_builtins(self):
        with pytest.raises(CompileError, match="NameError"):
            ScriptResolver("open('x')\n").compile()


class TestSession:
    """Tests for running compiled scripts."""

    def test_invoke(self, test_script):
        program = ScriptResolver(test_script).compile()

        with program.session() as invoker:
            outcome = invoker.invoke("fn2", "a", "b", 1)

        assert outcome.kind == OutcomeKind.REPLACE
        assert outcome.value == "foobar"

    def test_invoke_no_change(self, test_script):
        program = ScriptResolver(test_script).compile()

        with program.session() as invoker:
            assert invoker.invoke("fn1", "a", "b", 1).kind == OutcomeKind.NO_CHANGE

    def test_invoke_error_value(self, test_script):
        program = ScriptResolver(test_script).compile()

        with program.session() as invoker:
            outcome = invoker.invoke("err1", "a", "b", 1)

        assert outcome.kind == OutcomeKind.DOMAIN_ERROR
        assert outcome.message == "an error occurred"

    def test_immutable_helper(self):
        script = '''
def wrap(src, dst, v):
    return immutable([v])
'''
        program = ScriptResolver(script).compile()

        with program.session() as invoker:
            assert invoker.invoke("wrap", "a", "b", 1).value == (1,)

    def test_blocked_import_at_call_time(self):
        script = '''
def sneaky(src, dst, v):
    import subprocess
'''
        program = ScriptResolver(script).compile()

        with program.session() as invoker:
            with pytest.raises(InvocationError) as exc:
                invoker.invoke("sneaky", "a", "b", 1)
        assert isinstance(exc.value.cause, ImportError)

    def test_import_module_route_blocked(self):
        script = '''
def cwd(src, dst, v):
    import importlib
    return importlib.import_module("os").getcwd()
'''
        program = ScriptResolver(script).compile()

        with program.session() as invoker:
            with pytest.raises(InvocationError) as exc:
                invoker.invoke("cwd", "a", "b", 1)
        assert isinstance(exc.value.cause, ImportError)
        assert "importlib" in str(exc.value)

    def test_sessions_are_isolated(self):
        script = '''
seen = []

def remember(src, dst, v):
    seen.append(v)
    return len(seen)
'''
        program = ScriptResolver(script).compile()

        with program.session() as first:
            first.invoke("remember", "a", "b", 1)
            assert first.invoke("remember", "a", "b", 2).value == 2
        with program.session() as second:
            assert second.invoke("remember", "a", "b", 3).value == 1
