"""
State machine builder.

Accumulates state and transition declarations, then validates and/or
compiles them into a StateMachine. Declaring never fails; problems are
reported by ``validate()``.

Example:
    ```python
    import scriptfsm

    script = '''
    def truthy(src, dst, v):
        return bool(v)

    def falsy(src, dst, v):
        return not v
    '''

    machine = (
        scriptfsm.new(script)
        .state("S")
        .state("T")
        .state("F")
        .transition("S", "T", "truthy")
        .transition("S", "F", "falsy")
        .validate_compile()
    )
    machine.run("S", 1)  # halts in T with value 1
    ```
"""

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple, Union

from scriptfsm.machine.compiler import MachineCompiler
from scriptfsm.machine.schema import StateDef, TransitionDef
from scriptfsm.machine.state_machine import StateMachine
from scriptfsm.machine.validator import MachineValidator
from scriptfsm.resolver.protocol import CallableResolver
from scriptfsm.resolver.script import ScriptResolver

if TYPE_CHECKING:
    from scriptfsm.config.settings import FSMSettings

logger = logging.getLogger(__name__)


class Builder:
    """
    Mutable accumulator of state and transition declarations.

    Not safe for concurrent mutation. Compiled machines do not observe
    declarations made after ``compile()``.
    """

    def __init__(
        self,
        resolver: CallableResolver,
        settings: Optional["FSMSettings"] = None,
    ):
        self.resolver = resolver
        self.settings = settings
        self._states: Dict[str, StateDef] = {}
        self._transitions: Dict[str, List[TransitionDef]] = {}

    @property
    def states(self) -> Mapping[str, StateDef]:
        """Declared states by name (read-only view)."""
        return MappingProxyType(self._states)

    @property
    def transitions(self) -> Mapping[str, Tuple[TransitionDef, ...]]:
        """Declared transitions grouped by source state, in declaration order."""
        return MappingProxyType({src: tuple(ts) for src, ts in self._transitions.items()})

    def state(self, name: str, entry: str = "", exit: str = "") -> "Builder":
        """
        Declare a state with optional entry/exit callable names.

        Re-declaring a state replaces its previous entry/exit names.

        Entry callables receive ``(previous_state, entered_state, value)``;
        exit callables receive ``(left_state, next_state, value)``.
        """
        self._states[name] = StateDef(name=name, entry=entry, exit=exit)
        return self

    def transition(
        self, src: str, dst: str, condition: str = "", action: str = ""
    ) -> "Builder":
        """
        Append a transition from ``src`` to ``dst``.

        Transitions out of a state are evaluated in the order they are
        declared and the first one whose condition holds is taken. An empty
        condition always holds, so transitions declared after an
        unconditional one are unreachable.
        """
        self._transitions.setdefault(src, []).append(
            TransitionDef(src=src, dst=dst, condition=condition, action=action)
        )
        return self

    def validate(self) -> None:
        """
        Validate all states and transitions.

        Raises:
            BuildError: On the first invalid declaration
            CompileError: If the resolver cannot load its source
        """
        MachineValidator(self.resolver).validate(self._states, self._transitions)

    def compile(self) -> StateMachine:
        """
        Compile without validating.

        Raises:
            CompileError: If the resolver cannot materialize its program
        """
        return MachineCompiler(self.resolver, max_steps=self._max_steps()).compile(
            self._states, self._transitions
        )

    def validate_compile(self) -> StateMachine:
        """Validate, then compile."""
        self.validate()
        return self.compile()

    def _max_steps(self) -> Optional[int]:
        if self.settings is None:
            return None
        return self.settings.engine.max_steps


def new(
    source: Union[str, bytes],
    settings: Optional["FSMSettings"] = None,
) -> Builder:
    """
    Create a Builder backed by a Python user script.

    The script must export every condition and action callable the machine
    references. Each takes ``(src, dst, v)``; ``v`` is read-only. Returning
    a value replaces ``v``, returning None keeps it, and returning
    ``error(message)`` stops the run with a DomainError.

    Args:
        source: Python source of the user script
        settings: Configuration (loaded from env/scriptfsm.yaml if omitted)
    """
    if settings is None:
        from scriptfsm.config.settings import FSMSettings

        settings = FSMSettings()

    resolver = ScriptResolver(
        source,
        blocked_modules=settings.script.blocked_modules,
        filename=settings.script.filename,
    )
    return Builder(resolver, settings=settings)
