"""
Build-time validation of machine declarations.

Checks referential integrity and callable signatures before any run starts:
- every state name is non-empty
- every transition's source and destination are declared states
- every referenced callable exists, is callable, and takes 3 arguments

Within one entity the order is fixed (entry before exit, condition before
action). Across entities the first failing item in declaration order is
reported, but callers should not rely on which of several simultaneous
errors wins.
"""

import logging
from typing import List, Mapping

from scriptfsm.errors import EmptyStateNameError, StateNotFoundError
from scriptfsm.machine.schema import StateDef, TransitionDef
from scriptfsm.resolver.protocol import CallableResolver

logger = logging.getLogger(__name__)


class MachineValidator:
    """
    Validate declarations against a callable resolver. Never mutates.

    Example:
        ```python
        validator = MachineValidator(resolver)
        validator.validate(states, transitions)  # raises BuildError
        ```
    """

    def __init__(self, resolver: CallableResolver):
        self.resolver = resolver

    def validate(
        self,
        states: Mapping[str, StateDef],
        transitions: Mapping[str, List[TransitionDef]],
    ) -> None:
        """
        Validate all states, then all transitions.

        Args:
            states: Declared states by name
            transitions: Transitions grouped by source state, in declaration order

        Raises:
            BuildError: On the first invalid declaration
            CompileError: If the resolver cannot load its source
        """
        for name, state in states.items():
            if name == "":
                raise EmptyStateNameError()
            self._check_function(state.entry)
            self._check_function(state.exit)

        for src, outgoing in transitions.items():
            if src not in states:
                raise StateNotFoundError(src)
            for t in outgoing:
                if t.dst not in states:
                    # reports the source state, kept for compatibility
                    raise StateNotFoundError(src)
                self._check_function(t.condition)
                self._check_function(t.action)

        logger.debug(
            f"Validated {len(states)} states and "
            f"{sum(len(v) for v in transitions.values())} transitions"
        )

    def _check_function(self, name: str) -> None:
        if name:
            self.resolver.probe(name).raise_for_status()
