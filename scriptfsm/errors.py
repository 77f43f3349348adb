"""
Error taxonomy for the state machine engine.

Three families, one per phase:
- BuildError: detected by Builder.validate()
- CompileError: detected by Builder.compile()
- RunError: detected by StateMachine.run()

Every error carries its structured fields as attributes and in a
``context`` dict so that callers can render precise diagnostics.
"""

from typing import Any, Dict, Optional


class FSMError(Exception):
    """Base class for all state machine errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


# ---------------------------------------------------------------------------
# Build errors
# ---------------------------------------------------------------------------


class BuildError(FSMError):
    """A state or transition declaration failed validation."""


class EmptyStateNameError(BuildError):
    def __init__(self):
        super().__init__("state name must not be empty")


class StateNotFoundError(BuildError):
    """A transition references a state that was never declared."""

    def __init__(self, state: str):
        super().__init__(f"state '{state}' not found", context={"state": state})
        self.state = state


class FunctionNotFoundError(BuildError):
    def __init__(self, name: str):
        super().__init__(f"function '{name}' not found", context={"name": name})
        self.name = name


class NotCallableError(BuildError):
    def __init__(self, name: str):
        super().__init__(f"'{name}' is not callable", context={"name": name})
        self.name = name


class WrongArityError(BuildError):
    def __init__(self, name: str, want: int, got: int):
        super().__init__(
            f"function '{name}' wrong number of arguments: want {want} got {got}",
            context={"name": name, "want": want, "got": got},
        )
        self.name = name
        self.want = want
        self.got = got


# ---------------------------------------------------------------------------
# Compile errors
# ---------------------------------------------------------------------------


class CompileError(FSMError):
    """The invocation program could not be materialized."""

    def __init__(self, detail: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(detail, context=context)
        self.detail = detail


# ---------------------------------------------------------------------------
# Run errors
# ---------------------------------------------------------------------------


class RunError(FSMError):
    """A run was aborted."""


class ValueConversionError(RunError):
    """A host value cannot be represented as a machine value."""

    def __init__(self, value: Any, reason: str):
        super().__init__(
            f"cannot convert value of type '{type(value).__name__}': {reason}",
            context={"type": type(value).__name__, "reason": reason},
        )
        self.value = value
        self.reason = reason


class InvocationError(RunError):
    """The collaborator failed to execute a callable (host/script fault)."""

    def __init__(
        self,
        function: str,
        src: str,
        dst: str,
        cause: BaseException,
    ):
        where = f" ({src} -> {dst})" if src or dst else ""
        super().__init__(
            f"error invoking '{function}'{where}: {type(cause).__name__}: {cause}",
            context={"function": function, "src": src, "dst": dst},
        )
        self.function = function
        self.src = src
        self.dst = dst
        self.cause = cause


class DomainError(RunError):
    """A callable explicitly returned an error value."""

    def __init__(self, function: str, src: str, dst: str, message: str):
        super().__init__(
            message,
            context={"function": function, "src": src, "dst": dst},
        )
        self.function = function
        self.src = src
        self.dst = dst
        self.message = message


class StepLimitExceededError(RunError):
    """The configured transition ceiling was reached."""

    def __init__(self, limit: int, state: str):
        super().__init__(
            f"step limit of {limit} transitions exceeded in state '{state}'",
            context={"limit": limit, "state": state},
        )
        self.limit = limit
        self.state = state
