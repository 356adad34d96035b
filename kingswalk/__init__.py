"""Hill-climbing solver for the king's-walk (Hidato) number puzzle."""

from kingswalk.utility import InvalidInput, State, compute_score, random_puzzle
from kingswalk.hillclimb import HillclimbResult, hillclimb, run_hillclimb

__all__ = [
    "InvalidInput",
    "State",
    "compute_score",
    "random_puzzle",
    "HillclimbResult",
    "hillclimb",
    "run_hillclimb",
]
