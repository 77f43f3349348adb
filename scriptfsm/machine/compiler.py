"""
Machine compiler.

Freezes builder declarations into an immutable StateMachine. Compilation
performs no validation: a machine compiled from unvalidated declarations
with dangling references fails lazily, at run time, with InvocationError.
"""

import logging
from typing import List, Mapping, Optional

from scriptfsm.machine.schema import StateDef, TransitionDef
from scriptfsm.machine.state_machine import StateMachine
from scriptfsm.resolver.protocol import CallableResolver

logger = logging.getLogger(__name__)


class MachineCompiler:
    """Compile declarations against a resolver into a StateMachine."""

    def __init__(self, resolver: CallableResolver, max_steps: Optional[int] = None):
        self.resolver = resolver
        self.max_steps = max_steps

    def compile(
        self,
        states: Mapping[str, StateDef],
        transitions: Mapping[str, List[TransitionDef]],
    ) -> StateMachine:
        """
        Build the invocation program and snapshot the declarations.

        Args:
            states: Declared states by name
            transitions: Transitions grouped by source state, in declaration order

        Returns:
            Compiled StateMachine

        Raises:
            CompileError: If the resolver cannot materialize its program
        """
        program = self.resolver.compile()

        # empty function names mean "no action" and are dropped
        entry_fns = {name: s.entry for name, s in states.items() if s.entry}
        exit_fns = {name: s.exit for name, s in states.items() if s.exit}
        table = {src: tuple(ts) for src, ts in transitions.items()}

        machine = StateMachine(
            program,
            entry_fns=entry_fns,
            exit_fns=exit_fns,
            transitions=table,
            max_steps=self.max_steps,
        )
        logger.info(
            f"Compiled state machine with {len(states)} states and "
            f"{sum(len(ts) for ts in table.values())} transitions"
        )
        return machine
