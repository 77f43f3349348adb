"""
Protocol definitions for callable resolvers.

A callable resolver is the engine's only window onto user code. It turns a
function name into something invocable with ``(src, dst, value)`` and
reports, before any run starts, whether a name is usable at all.

The contract has three layers:
- CallableResolver: probes names and compiles an InvocationProgram
- InvocationProgram: immutable artifact shared by a compiled machine,
  opening one isolated session per run
- Invoker: executes callables inside a session and translates results
  into Outcome values
"""

import inspect
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from scriptfsm.errors import (
    BuildError,
    FunctionNotFoundError,
    NotCallableError,
    WrongArityError,
)
from scriptfsm.resolver.values import ErrorValue, freeze, is_truthy

# Every callable takes (src, dst, value).
CALLABLE_ARITY = 3


class ProbeStatus(Enum):
    """Result of probing a function name."""

    OK = "ok"
    NOT_FOUND = "not_found"
    NOT_CALLABLE = "not_callable"
    WRONG_ARITY = "wrong_arity"


@dataclass(frozen=True)
class ProbeResult:
    """Details of a probed function name."""

    name: str
    status: ProbeStatus
    arity: Optional[int] = None  # None when the callable takes *args

    @property
    def ok(self) -> bool:
        return self.status == ProbeStatus.OK

    def to_error(self) -> Optional[BuildError]:
        """The BuildError matching this result, or None if the probe passed."""
        if self.status == ProbeStatus.NOT_FOUND:
            return FunctionNotFoundError(self.name)
        if self.status == ProbeStatus.NOT_CALLABLE:
            return NotCallableError(self.name)
        if self.status == ProbeStatus.WRONG_ARITY:
            return WrongArityError(self.name, CALLABLE_ARITY, self.arity)
        return None

    def raise_for_status(self) -> None:
        err = self.to_error()
        if err is not None:
            raise err


class OutcomeKind(Enum):
    """What a callable asked the engine to do with the value."""

    NO_CHANGE = "no_change"
    REPLACE = "replace"
    DOMAIN_ERROR = "domain_error"


@dataclass(frozen=True)
class Outcome:
    """Translated result of one callable invocation."""

    kind: OutcomeKind
    value: Any = None
    message: str = ""

    @classmethod
    def no_change(cls) -> "Outcome":
        return cls(kind=OutcomeKind.NO_CHANGE)

    @classmethod
    def replace(cls, value: Any) -> "Outcome":
        return cls(kind=OutcomeKind.REPLACE, value=value)

    @classmethod
    def domain_error(cls, message: str) -> "Outcome":
        return cls(kind=OutcomeKind.DOMAIN_ERROR, message=message)

    @classmethod
    def from_result(cls, result: Any, condition: bool = False) -> "Outcome":
        """
        Translate a raw callable return value.

        None means "keep the current value", an ErrorValue aborts the run,
        anything else replaces the value after being frozen. Condition
        results are reduced to their truthiness instead of being frozen.

        Raises:
            ValueConversionError: If the result cannot be frozen
        """
        if result is None:
            return cls.no_change()
        if isinstance(result, ErrorValue):
            return cls.domain_error(result.message)
        if condition:
            return cls.replace(is_truthy(result))
        return cls.replace(freeze(result))


def probe_object(name: str, obj: Any) -> ProbeResult:
    """
    Probe an already-looked-up export.

    Arity is the number of positional parameters. Callables accepting
    ``*args`` have no fixed arity and always pass, as do callables whose
    signature cannot be introspected (some C builtins).

    Args:
        name: Export name (for diagnostics)
        obj: The exported object

    Returns:
        ProbeResult for the export
    """
    if not callable(obj):
        return ProbeResult(name=name, status=ProbeStatus.NOT_CALLABLE)

    try:
        signature = inspect.signature(obj)
    except (TypeError, ValueError):
        return ProbeResult(name=name, status=ProbeStatus.OK)

    arity = 0
    for param in signature.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return ProbeResult(name=name, status=ProbeStatus.OK)
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            arity += 1

    if arity != CALLABLE_ARITY:
        return ProbeResult(name=name, status=ProbeStatus.WRONG_ARITY, arity=arity)
    return ProbeResult(name=name, status=ProbeStatus.OK, arity=arity)


class Invoker(ABC):
    """Executes named callables inside one session."""

    @abstractmethod
    def invoke(
        self,
        function: str,
        src: str,
        dst: str,
        value: Any,
        condition: bool = False,
    ) -> Outcome:
        """
        Invoke ``function(src, dst, value)``.

        Args:
            function: Exported function name
            src: Source state of the transition being evaluated/executed
            dst: Destination state of the transition
            value: Current (frozen) machine value
            condition: True when evaluating a transition condition

        Returns:
            Outcome describing what to do with the value

        Raises:
            InvocationError: If the callable could not be executed
            ValueConversionError: If the callable returned an unrepresentable value
        """
        ...


class InvocationProgram(ABC):
    """
    Compiled, shareable dispatch artifact.

    Implementations must be safe to share across threads: all per-run
    mutable state lives in the Invoker yielded by ``session()``.
    """

    @abstractmethod
    def session(self) -> AbstractContextManager[Invoker]:
        """Open an isolated execution context for a single run."""
        ...


class CallableResolver(ABC):
    """
    Base class for callable resolvers.

    Example:
        ```python
        class EchoResolver(CallableResolver):
            def probe(self, name: str) -> ProbeResult:
                return ProbeResult(name=name, status=ProbeStatus.OK, arity=3)

            def compile(self) -> InvocationProgram:
                ...
        ```
    """

    @abstractmethod
    def probe(self, name: str) -> ProbeResult:
        """
        Check that ``name`` resolves to a 3-argument callable.

        Raises:
            CompileError: If the underlying source cannot be loaded
        """
        ...

    @abstractmethod
    def compile(self) -> InvocationProgram:
        """
        Materialize the invocation program.

        Raises:
            CompileError: If the underlying source cannot be loaded
        """
        ...
