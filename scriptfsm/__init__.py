"""
scriptfsm - Scriptable finite state machines.

States and ordered transitions are declared in Python; conditions and
entry/exit/transition actions are callables exported by a user script (or
supplied directly by the host). A compiled machine is immutable and can be
run any number of times, concurrently.

Quick Start:
    ```python
    import scriptfsm

    script = '''
    def is_positive(src, dst, v):
        return v > 0

    def double(src, dst, v):
        return v * 2
    '''

    machine = (
        scriptfsm.new(script)
        .state("start")
        .state("done")
        .transition("start", "done", "is_positive", "double")
        .validate_compile()
    )
    assert machine.run("start", 21) == 42
    ```

Using host callables instead of a script:
    ```python
    from scriptfsm import Builder, NativeResolver

    resolver = NativeResolver({"always": lambda src, dst, v: True})
    machine = Builder(resolver).state("a").state("b").transition("a", "b", "always").compile()
    ```
"""

__version__ = "0.1.0"

# Configuration
from scriptfsm.config.settings import FSMSettings

# Errors
from scriptfsm.errors import (
    FSMError,
    BuildError,
    EmptyStateNameError,
    StateNotFoundError,
    FunctionNotFoundError,
    NotCallableError,
    WrongArityError,
    CompileError,
    RunError,
    ValueConversionError,
    InvocationError,
    DomainError,
    StepLimitExceededError,
)

# Resolvers
from scriptfsm.resolver import (
    CallableResolver,
    ScriptResolver,
    NativeResolver,
    ProbeResult,
    ProbeStatus,
    Outcome,
    ErrorValue,
    FrozenDict,
    error,
    freeze,
    thaw,
)

# Machine
from scriptfsm.machine import (
    Builder,
    new,
    StateMachine,
    StateDef,
    TransitionDef,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "FSMSettings",
    # Errors
    "FSMError",
    "BuildError",
    "EmptyStateNameError",
    "StateNotFoundError",
    "FunctionNotFoundError",
    "NotCallableError",
    "WrongArityError",
    "CompileError",
    "RunError",
    "ValueConversionError",
    "InvocationError",
    "DomainError",
    "StepLimitExceededError",
    # Resolvers
    "CallableResolver",
    "ScriptResolver",
    "NativeResolver",
    "ProbeResult",
    "ProbeStatus",
    "Outcome",
    "ErrorValue",
    "FrozenDict",
    "error",
    "freeze",
    "thaw",
    # Machine
    "Builder",
    "new",
    "StateMachine",
    "StateDef",
    "TransitionDef",
]
