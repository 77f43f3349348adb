"""
Compiled state machine and its execution loop.

A run starts in a caller-supplied state with a caller-supplied value and
repeats until no transition is available:

1. Select: walk the current state's transitions in declaration order. An
   unconditional transition is taken immediately; otherwise the condition
   callable is invoked and the first truthy result wins.
2. Sequence: exit action of the source, transition action, entry action of
   the destination, in that order. Each may replace the value.
3. Advance to the destination and repeat.

Any domain error or invocation failure aborts the run immediately. Value
replacements already applied by earlier steps are not rolled back.
"""

import asyncio
import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple

from scriptfsm.errors import DomainError, StepLimitExceededError
from scriptfsm.machine.schema import TransitionDef
from scriptfsm.resolver.protocol import InvocationProgram, Invoker, OutcomeKind
from scriptfsm.resolver.values import freeze

logger = logging.getLogger(__name__)

TransitionCallback = Callable[[str, str, Any], None]


class StateMachine:
    """
    Immutable, run-ready state machine. Build one with a Builder.

    A StateMachine holds no mutable state once constructed, so any number of
    threads may call ``run`` on the same instance concurrently. Each run
    gets its own session from the invocation program.

    Example:
        ```python
        machine = scriptfsm.new(script).state("S").state("T").transition("S", "T").compile()
        result = machine.run("S", 1)
        ```
    """

    def __init__(
        self,
        program: InvocationProgram,
        entry_fns: Mapping[str, str],
        exit_fns: Mapping[str, str],
        transitions: Mapping[str, Tuple[TransitionDef, ...]],
        max_steps: Optional[int] = None,
    ):
        self._program = program
        self._entry_fns = MappingProxyType(dict(entry_fns))
        self._exit_fns = MappingProxyType(dict(exit_fns))
        self._transitions = MappingProxyType(
            {src: tuple(ts) for src, ts in transitions.items()}
        )
        self._max_steps = max_steps

    @property
    def entry_functions(self) -> Mapping[str, str]:
        """State name -> entry callable name (states without one are omitted)."""
        return self._entry_fns

    @property
    def exit_functions(self) -> Mapping[str, str]:
        """State name -> exit callable name (states without one are omitted)."""
        return self._exit_fns

    @property
    def max_steps(self) -> Optional[int]:
        return self._max_steps

    def transitions_from(self, state: str) -> Tuple[TransitionDef, ...]:
        """Transitions out of ``state`` in evaluation order."""
        return self._transitions.get(state, ())

    def run(
        self,
        start: str,
        value: Any,
        on_transition: Optional[TransitionCallback] = None,
    ) -> Any:
        """
        Execute the machine until no transition is available.

        Args:
            start: Initial state
            value: Initial value, frozen before the first step
            on_transition: Called as ``on_transition(src, dst, value)`` after
                each completed transition. Exceptions it raises propagate,
                which lets callers enforce deadlines or their own bounds.

        Returns:
            Final value (in frozen form)

        Raises:
            ValueConversionError: If a value has no machine representation
            InvocationError: If a callable could not be executed
            DomainError: If a callable returned an error value
            StepLimitExceededError: If max_steps transitions were exceeded
        """
        current = freeze(value)
        src = start
        steps = 0

        with self._program.session() as invoker:
            while True:
                t = self._select(invoker, src, current)
                if t is None:
                    break

                if self._max_steps is not None and steps >= self._max_steps:
                    raise StepLimitExceededError(self._max_steps, src)

                current = self._do_transition(invoker, t, current)
                steps += 1
                logger.debug(f"Transition {src} -> {t.dst} (step {steps})")

                if on_transition is not None:
                    on_transition(src, t.dst, current)
                src = t.dst

        logger.debug(f"Run halted in state '{src}' after {steps} transitions")
        return current

    async def run_async(
        self,
        start: str,
        value: Any,
        on_transition: Optional[TransitionCallback] = None,
    ) -> Any:
        """Run in a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.run, start, value, on_transition)

    def _select(
        self, invoker: Invoker, src: str, value: Any
    ) -> Optional[TransitionDef]:
        """First transition out of ``src`` whose condition holds, or None."""
        for t in self._transitions.get(src, ()):
            if t.is_unconditional:
                return t
            outcome = invoker.invoke(t.condition, src, t.dst, value, condition=True)
            if outcome.kind == OutcomeKind.DOMAIN_ERROR:
                raise DomainError(t.condition, src, t.dst, outcome.message)
            # "no value" reads as falsy
            if outcome.kind == OutcomeKind.REPLACE and outcome.value:
                return t
        return None

    def _do_transition(self, invoker: Invoker, t: TransitionDef, value: Any) -> Any:
        src, dst = t.src, t.dst
        for fn in (self._exit_fns.get(src), t.action, self._entry_fns.get(dst)):
            if fn:
                value = self._apply(invoker, fn, src, dst, value)
        return value

    def _apply(self, invoker: Invoker, fn: str, src: str, dst: str, value: Any) -> Any:
        outcome = invoker.invoke(fn, src, dst, value)
        if outcome.kind == OutcomeKind.DOMAIN_ERROR:
            raise DomainError(fn, src, dst, outcome.message)
        if outcome.kind == OutcomeKind.REPLACE:
            return outcome.value
        return value

    def __repr__(self) -> str:
        count = sum(len(ts) for ts in self._transitions.values())
        return f"StateMachine(transitions={count}, max_steps={self._max_steps})"
