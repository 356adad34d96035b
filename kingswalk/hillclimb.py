import time

import numpy as np
from tqdm.auto import tqdm

from kingswalk.utility import State, random_puzzle

DEFAULT_MAX_RESTARTS = 1000
DEFAULT_BETA = 2.0
ESCAPES = ("restart", "anneal")


class HillclimbResult:
    """Container for storing the score trace and summary of one hill-climbing run."""
    def __init__(self, N, scores, escape_indices, best_score, max_score, restarts, iterations, final_state, elapsed):
        self.N = N
        self.scores = scores                  # np.array: initial score, then one entry per committed move or escape
        self.escape_indices = escape_indices  # positions in scores recorded right after an escape
        self.best_score = best_score
        self.max_score = max_score
        self.perfect = best_score == max_score
        self.restarts = restarts              # number of escapes used
        self.iterations = iterations          # committed improving swaps
        self.final_state = final_state        # best board found
        self.elapsed = elapsed                # seconds


# Move selection
def best_swap(state, deadline=None):
    """
    Find the free-cell swap with the largest score change.

    Pairs are scanned in index order and a later pair only replaces the
    current best when it is strictly better, so ties go to the first pair.

    Args:
        state: State to inspect; it is not modified.
        deadline: time.perf_counter() value after which the scan is abandoned.

    Returns:
        ((i, j), delta), or (None, 0) when fewer than two cells are free
        or the deadline passed mid-scan.
    """
    free = state.free_cells
    best_pair = None
    best_delta = 0
    for a, i in enumerate(free):
        if deadline is not None and time.perf_counter() >= deadline:
            return None, 0
        for j in free[a + 1:]:
            delta = state.swap_delta(i, j)
            if best_pair is None or delta > best_delta:
                best_pair = (int(i), int(j))
                best_delta = delta
    return best_pair, best_delta


def step(state):
    """Commit the best swap if it strictly improves the score. Returns the score."""
    pair, delta = best_swap(state)
    if pair is not None and delta > 0:
        state.apply_swap(*pair)
    return state.score()


def metropolis_kick(state, beta, steps, rng=None):
    """
    Random walk used to leave a plateau.

    Args:
        state: State to perturb in place.
        beta: Inverse temperature; a swap losing d points is accepted with probability exp(-beta * d).
        steps: Number of proposed swaps.
        rng: Random number generator.

    Returns:
        Number of accepted swaps.
    """
    if rng is None:
        rng = np.random.default_rng()
    free = state.free_cells
    if free.size < 2:
        return 0

    accepted = 0
    for _ in range(steps):
        i, j = rng.choice(free, size=2, replace=False)
        delta = state.swap_delta(i, j)
        if delta >= 0 or rng.random() < np.exp(beta * delta):
            state.apply_swap(i, j)
            accepted += 1
    return accepted


def hillclimb(
    state,
    max_restarts=DEFAULT_MAX_RESTARTS,
    max_steps=None,
    time_limit=None,
    escape="restart",
    beta=DEFAULT_BETA,
    kick_steps=None,
    seed=None,
    rng=None,
    verbose=False,
):
    """
    Best-improvement hill climbing with plateau escapes.

    The state climbs until no swap improves its score, then escapes the
    plateau and climbs again. The search stops on a perfect score or when
    the budget runs out, and the state is left holding the best board seen.

    Args:
        state: State to optimize in place.
        max_restarts: Maximum number of plateau escapes.
        max_steps: Maximum number of committed improving swaps (None: unbounded).
        time_limit: Wall-clock budget in seconds (None: unbounded).
        escape: 'restart' (reshuffle the free cells) or 'anneal' (Metropolis kick).
        beta: Inverse temperature for 'anneal'.
        kick_steps: Proposals per Metropolis kick (default: 4 per free cell).
        seed: Random seed, used when rng is None.
        rng: Random number generator.
        verbose: Print progress.

    Returns:
        HillclimbResult.
    """
    if escape not in ESCAPES:
        raise ValueError(f"Unknown escape: {escape}")
    if max_restarts < 0:
        raise ValueError("max_restarts must be non-negative")
    if max_steps is not None and max_steps < 0:
        raise ValueError("max_steps must be non-negative")
    if rng is None:
        rng = np.random.default_rng(seed)
    if kick_steps is None:
        kick_steps = 4 * state.free_cells.size

    t0 = time.perf_counter()
    deadline = None if time_limit is None else t0 + time_limit

    def out_of_budget():
        if max_steps is not None and iterations >= max_steps:
            return True
        return deadline is not None and time.perf_counter() >= deadline

    max_score = state.max_score()
    best_score = state.score()
    best_board = state.board.copy()

    scores = [best_score]
    escape_indices = []
    restarts = 0
    iterations = 0

    while True:
        while not state.is_perfect() and not out_of_budget():
            pair, delta = best_swap(state, deadline)
            if pair is None or delta <= 0:
                break
            state.apply_swap(*pair)
            iterations += 1
            scores.append(state.score())

        if state.score() > best_score:
            best_score = state.score()
            best_board = state.board.copy()

        if best_score == max_score or restarts >= max_restarts or out_of_budget():
            break
        if state.free_cells.size < 2:
            break

        if escape == "restart":
            state.random_start(rng)
        else:
            metropolis_kick(state, beta, kick_steps, rng)
        restarts += 1
        escape_indices.append(len(scores))
        scores.append(state.score())

        if verbose and restarts % 100 == 0:
            print(f"restart {restarts}: best={best_score}/{max_score}, iterations={iterations}")

    if not np.array_equal(state.board, best_board):
        state.load(best_board)

    elapsed = time.perf_counter() - t0
    if verbose:
        print(f"N={state.N}: score {best_score}/{max_score} after {restarts} restarts, {elapsed:.3f}s")

    return HillclimbResult(
        N=state.N,
        scores=np.array(scores),
        escape_indices=escape_indices,
        best_score=best_score,
        max_score=max_score,
        restarts=restarts,
        iterations=iterations,
        final_state=best_board,
        elapsed=elapsed,
    )


def run_hillclimb(values, N, **kwargs):
    """Build a State from raw values and climb it. Returns (state, result)."""
    state = State(values, N)
    result = hillclimb(state, **kwargs)
    return state, result


def average_score_over_runs(
    N,
    clues,
    runs=3,
    max_restarts=200,
    escape="restart",
    beta=DEFAULT_BETA,
    base_seed=None,
):
    """
    Climb several random puzzles and return:
      - per-run score traces (padded with their last value to a common length)
      - mean score per step
      - std of score per step
      - number of runs that reached a perfect score

    Args:
        N: Board size.
        clues: Number of fixed cells in each generated puzzle.
        runs: Number of independent runs.
        max_restarts: Escape budget per run.
        escape: 'restart' or 'anneal'.
        beta: Inverse temperature for 'anneal'.
        base_seed: Base seed; if not None, seeds are base_seed + run_idx.

    Returns:
        N, scores_matrix, mean_score, std_score, num_perfect_runs
    """
    if runs < 1:
        raise ValueError(f"runs must be at least 1, got {runs}")

    traces = []
    num_perfect_runs = 0

    it = range(runs)
    it = tqdm(it, desc=f"N={N}, escape={escape}", leave=False)

    for run_idx in it:
        seed = None if base_seed is None else base_seed + run_idx
        rng = np.random.default_rng(seed)

        puzzle = random_puzzle(N, clues, rng)
        _, result = run_hillclimb(
            puzzle,
            N,
            max_restarts=max_restarts,
            escape=escape,
            beta=beta,
            rng=rng,
        )
        if result.perfect:
            num_perfect_runs += 1
        traces.append(result.scores)

    length = max(trace.size for trace in traces)
    padded = [np.concatenate([t, np.full(length - t.size, t[-1], dtype=t.dtype)]) for t in traces]

    scores_matrix = np.vstack(padded)
    mean_score = scores_matrix.mean(axis=0)
    std_score = scores_matrix.std(axis=0)
    final_scores = scores_matrix[:, -1]
    print(f"N={N}, num_perfect_runs={num_perfect_runs}, final_scores={final_scores.tolist()}")

    return N, scores_matrix, mean_score, std_score, num_perfect_runs


def perfect_rate_vs_N(
    N_values,
    clues_fraction=0.25,
    runs=5,
    max_restarts=200,
    escape="restart",
    beta=DEFAULT_BETA,
    base_seed=None,
):
    """Climb random puzzles for each N and record the best score of every run."""
    Ns = list(N_values)
    all_best_scores = []
    num_perfect = []

    for idx, N in enumerate(tqdm(Ns, desc="Processing N values")):
        clues = min(N * N, max(1, int(round(clues_fraction * N * N))))
        best_for_N = []
        for run_idx in range(runs):
            seed = None if base_seed is None else base_seed + idx * runs + run_idx
            rng = np.random.default_rng(seed)
            _, result = run_hillclimb(
                random_puzzle(N, clues, rng),
                N,
                max_restarts=max_restarts,
                escape=escape,
                beta=beta,
                rng=rng,
            )
            best_for_N.append(result.best_score)
        all_best_scores.append(best_for_N)
        num_perfect.append(sum(score == N * N - 1 for score in best_for_N))

    return {
        "N_values": np.array(Ns),
        "all_best_scores": all_best_scores,
        "max_scores": np.array([N * N - 1 for N in Ns]),
        "num_perfect": num_perfect,
        "runs": runs,
        "escape": escape,
    }
