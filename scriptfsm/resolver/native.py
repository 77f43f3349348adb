"""Resolver backed by plain Python callables supplied by the host."""

from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping, Optional

from scriptfsm.resolver.protocol import (
    CallableResolver,
    InvocationProgram,
    Invoker,
    Outcome,
    ProbeResult,
    ProbeStatus,
    probe_object,
)
from scriptfsm.resolver.script import invoke_export


class NativeResolver(CallableResolver):
    """
    Resolve callables from a name -> object mapping.

    The functions are shared by every run, so they must be reentrant.
    Returning ``scriptfsm.error(msg)`` signals a domain error, returning
    None keeps the value.

    Example:
        ```python
        resolver = NativeResolver({"truthy": lambda src, dst, v: bool(v)})
        ```
    """

    def __init__(self, functions: Optional[Mapping[str, Any]] = None):
        self._functions = dict(functions or {})

    def register(self, name: str, fn: Callable[[str, str, Any], Any]) -> "NativeResolver":
        """Register a callable. Overwrites if already registered."""
        self._functions[name] = fn
        return self

    def names(self) -> list[str]:
        """List all registered names."""
        return list(self._functions)

    def probe(self, name: str) -> ProbeResult:
        if name not in self._functions:
            return ProbeResult(name=name, status=ProbeStatus.NOT_FOUND)
        return probe_object(name, self._functions[name])

    def compile(self) -> "NativeProgram":
        # snapshot so later register() calls don't reach compiled machines
        return NativeProgram(MappingProxyType(dict(self._functions)))


class NativeProgram(InvocationProgram):
    def __init__(self, functions: Mapping[str, Any]):
        self._invoker = NativeInvoker(functions)

    @contextmanager
    def session(self) -> Iterator["NativeInvoker"]:
        yield self._invoker


class NativeInvoker(Invoker):
    def __init__(self, functions: Mapping[str, Any]):
        self._functions = functions

    def invoke(
        self,
        function: str,
        src: str,
        dst: str,
        value: Any,
        condition: bool = False,
    ) -> Outcome:
        return invoke_export(self._functions, function, src, dst, value, condition)
