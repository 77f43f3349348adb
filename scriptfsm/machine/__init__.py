"""
State machine module.

Contains the build/compile/run pipeline:
- Schema: StateDef, TransitionDef
- Builder: declaration accumulator and the ``new`` entry point
- Validator: MachineValidator for build-time checks
- Compiler: MachineCompiler producing immutable machines
- StateMachine: the execution engine
"""

from scriptfsm.machine.schema import StateDef, TransitionDef
from scriptfsm.machine.state_machine import StateMachine
from scriptfsm.machine.validator import MachineValidator
from scriptfsm.machine.compiler import MachineCompiler
from scriptfsm.machine.builder import Builder, new

__all__ = [
    # Schema
    "StateDef",
    "TransitionDef",
    # Pipeline
    "Builder",
    "new",
    "MachineValidator",
    "MachineCompiler",
    # Engine
    "StateMachine",
]
