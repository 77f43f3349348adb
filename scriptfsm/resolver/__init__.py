"""
Callable resolvers.

Contains the engine's contract with user code:
- Protocol: CallableResolver, InvocationProgram, Invoker, ProbeResult, Outcome
- ScriptResolver: callables exported by a Python user script
- NativeResolver: callables supplied directly by the host
- Values: freeze/thaw and the domain error marker
"""

from scriptfsm.resolver.protocol import (
    CALLABLE_ARITY,
    CallableResolver,
    InvocationProgram,
    Invoker,
    Outcome,
    OutcomeKind,
    ProbeResult,
    ProbeStatus,
    probe_object,
)
from scriptfsm.resolver.values import (
    ErrorValue,
    FrozenDict,
    error,
    freeze,
    is_truthy,
    thaw,
)
from scriptfsm.resolver.script import ScriptResolver, ScriptProgram
from scriptfsm.resolver.native import NativeResolver, NativeProgram

__all__ = [
    # Protocol
    "CALLABLE_ARITY",
    "CallableResolver",
    "InvocationProgram",
    "Invoker",
    "Outcome",
    "OutcomeKind",
    "ProbeResult",
    "ProbeStatus",
    "probe_object",
    # Values
    "ErrorValue",
    "FrozenDict",
    "error",
    "freeze",
    "is_truthy",
    "thaw",
    # Implementations
    "ScriptResolver",
    "ScriptProgram",
    "NativeResolver",
    "NativeProgram",
]
