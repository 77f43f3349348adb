"""
State and transition declarations.

Declarations are frozen Pydantic models: once recorded by a Builder they are
never mutated, only superseded (states) or appended (transitions).

No content validation happens here. An empty state name or a dangling
reference is stored as given and reported later by Builder.validate().
"""

from pydantic import BaseModel, ConfigDict


class StateDef(BaseModel):
    """
    A declared state.

    ``entry`` runs when the machine enters the state, ``exit`` when it
    leaves. Empty strings mean "no action".
    """

    model_config = ConfigDict(frozen=True)

    name: str
    entry: str = ""
    exit: str = ""


class TransitionDef(BaseModel):
    """
    A transition from ``src`` to ``dst``.

    An empty ``condition`` makes the transition unconditional. An empty
    ``action`` means no transition action.
    """

    model_config = ConfigDict(frozen=True)

    src: str
    dst: str
    condition: str = ""
    action: str = ""

    @property
    def is_unconditional(self) -> bool:
        return not self.condition
