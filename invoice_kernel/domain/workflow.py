"""
Canonical workflow types (``invoice_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for document state machines plus ``next_state``, the
single transition function every document drives its state through.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``invoice_modules`` or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions.
* ``next_state`` never invents an edge: an action that is not declared
  from the current state yields ``None`` and the caller keeps its state.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the document does.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: Hashable
    to_state: Hashable
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    Guarantees: validated at construction.
    """
    name: str
    description: str
    initial_state: Hashable
    states: tuple[Hashable, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[Hashable, ...] = ()

    def __post_init__(self):
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state {self.initial_state!r} "
                f"not in states"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action!r} "
                    f"references unknown state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Workflow {self.name}: terminal state {t.from_state!r} "
                    f"has outgoing transition {t.action!r}"
                )
        seen: set[tuple[Hashable, str]] = set()
        for t in self.transitions:
            key = (t.from_state, t.action)
            if key in seen:
                raise ValueError(
                    f"Workflow {self.name}: ambiguous action {t.action!r} "
                    f"from {t.from_state!r}"
                )
            seen.add(key)


def next_state(workflow: Workflow, state: Hashable, action: str) -> Hashable | None:
    """Return the target state of ``action`` from ``state``, or None.

    Pure: looks the edge up in the workflow definition and nothing else.
    """
    for t in workflow.transitions:
        if t.from_state == state and t.action == action:
            return t.to_state
    return None
