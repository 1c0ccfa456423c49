"""State model, enumeration and transition table for the seed-transport chain."""

from ant_transport.chain.space import StateSpace, enumerate_states
from ant_transport.chain.state import Configuration, ProblemSpec, decode_key, initial_configuration
from ant_transport.chain.transitions import TransitionTable, build_transitions

__all__ = [
    "Configuration",
    "ProblemSpec",
    "StateSpace",
    "TransitionTable",
    "build_transitions",
    "decode_key",
    "enumerate_states",
    "initial_configuration",
]
