import copy

import numpy as np

########################################################
# Utility functions for the king's-walk (Hidato) puzzle
########################################################


class InvalidInput(ValueError):
    """Raised when a board does not describe a valid partial permutation."""


# board representation #

def king_adjacent(a, b, N):
    """Return True if flat indices a and b are distinct cells one king move apart."""
    ra, ca = divmod(int(a), N)
    rb, cb = divmod(int(b), N)
    return a != b and abs(ra - rb) <= 1 and abs(ca - cb) <= 1


def check_values(values, N):
    """
    Validate raw input and return it as a flat integer array (a copy).

    Args:
        values: n*n non-negative integers, 0 meaning "empty". A 2-D N x N
            array is accepted and flattened row-major.
        N: Board side length.

    Raises:
        InvalidInput: wrong length, value out of [0, N*N] or a repeated clue.
    """
    if N < 1:
        raise InvalidInput(f"board size must be at least 1, got {N}")

    board = np.array(values, dtype=int).ravel()
    if board.size != N * N:
        raise InvalidInput(f"expected {N * N} values for N={N}, got {board.size}")

    out_of_range = board[(board < 0) | (board > N * N)]
    if out_of_range.size:
        raise InvalidInput(f"values must lie in [0, {N * N}], got {out_of_range.tolist()}")

    clues = board[board != 0]
    uniq, counts = np.unique(clues, return_counts=True)
    if np.any(counts > 1):
        raise InvalidInput(f"repeated fixed values: {uniq[counts > 1].tolist()}")

    return board


def seed_board(values, N):
    """Fill the empty cells, in index order, with the missing values in ascending order."""
    board = np.array(values, dtype=int).ravel()
    seen = np.zeros(N * N + 1, dtype=bool)
    seen[board] = True
    missing = np.flatnonzero(~seen[1:]) + 1
    board[board == 0] = missing
    return board


def get_positions(board):
    """Reverse map of a full board: positions[v] is the flat index holding v (slot 0 unused)."""
    board = np.asarray(board).ravel()
    positions = np.zeros(board.size + 1, dtype=int)
    positions[board] = np.arange(board.size)
    return positions


# Score model #

def compute_score(board, N):
    """Count the consecutive pairs (k, k+1) sitting on king-adjacent cells (O(N^2))."""
    board = np.asarray(board).ravel()
    if board.size < 2:
        return 0
    rows, cols = np.divmod(get_positions(board)[1:], N)
    dr = np.abs(np.diff(rows))
    dc = np.abs(np.diff(cols))
    return int(np.count_nonzero((dr <= 1) & (dc <= 1) & (dr + dc > 0)))


def format_board(board, N, score=None):
    """One bracketed row per line, followed by the score line when given."""
    board = np.asarray(board).ravel()
    lines = ["[" + ", ".join(str(int(v)) for v in board[r * N:(r + 1) * N]) + "]" for r in range(N)]
    if score is not None:
        lines.append(f"score: {score}")
    return "\n".join(lines)


# puzzle generation #

def snake_walk(N):
    """Boustrophedon numbering of the N x N board; always a perfect king's walk."""
    grid = np.arange(1, N * N + 1).reshape(N, N)
    grid[1::2] = grid[1::2, ::-1]
    return grid.ravel()


def random_puzzle(N, clues, rng=None):
    """
    Build a solvable puzzle with `clues` fixed cells.

    A snake walk is put through a random symmetry of the square (and a random
    reversal of the numbering), then every cell except `clues` random ones is
    blanked.
    """
    if rng is None:
        rng = np.random.default_rng()
    if not 0 <= clues <= N * N:
        raise ValueError(f"clues must lie in [0, {N * N}], got {clues}")

    grid = np.rot90(snake_walk(N).reshape(N, N), k=int(rng.integers(4)))
    if rng.random() < 0.5:
        grid = grid.T
    if rng.random() < 0.5:
        grid = N * N + 1 - grid
    solution = grid.ravel()

    puzzle = np.zeros(N * N, dtype=int)
    keep = rng.choice(N * N, size=clues, replace=False)
    puzzle[keep] = solution[keep]
    return puzzle


# state #

class State:
    """
    A fully assigned N x N board plus the mask of cells fixed by the input.

    The grid always holds a permutation of 1..N*N; only swaps between free
    cells are allowed afterwards, and the score is kept up to date after
    each one.
    """

    def __init__(self, values, N):
        clues = check_values(values, N)
        self.N = N
        self.fixed = clues != 0
        self.fixed.flags.writeable = False
        self.free_cells = np.flatnonzero(~self.fixed)
        self.board = seed_board(clues, N)
        self._reindex()

    def _reindex(self):
        self.position = get_positions(self.board)
        self._score = compute_score(self.board, self.N)

    def __str__(self):
        return format_board(self.board, self.N, self.score())

    def copy(self):
        other = copy.deepcopy(self)
        other.fixed.flags.writeable = False
        return other

    def score(self):
        return self._score

    def max_score(self):
        return self.N * self.N - 1

    def is_perfect(self):
        return self._score == self.max_score()

    def adjacent(self, k):
        """Whether values k and k+1 currently sit on king-adjacent cells."""
        return king_adjacent(self.position[k], self.position[k + 1], self.N)

    def _pair_terms(self, v1, v2):
        last = self.max_score()
        return {k for k in (v1 - 1, v1, v2 - 1, v2) if 1 <= k <= last}

    def swap_delta(self, i, j):
        """Score change that swapping cells i and j would cause. The state is left untouched."""
        v1 = int(self.board[i])
        v2 = int(self.board[j])
        terms = self._pair_terms(v1, v2)

        before = sum(self.adjacent(k) for k in terms)
        self.position[v1], self.position[v2] = j, i
        after = sum(self.adjacent(k) for k in terms)
        self.position[v1], self.position[v2] = i, j

        return after - before

    def apply_swap(self, i, j):
        """Swap two free cells and return the new score."""
        assert i != j, f"cannot swap cell {i} with itself"
        assert not (self.fixed[i] or self.fixed[j]), f"swap ({i}, {j}) touches a fixed cell"

        delta = self.swap_delta(i, j)
        v1 = int(self.board[i])
        v2 = int(self.board[j])
        self.board[i], self.board[j] = v2, v1
        self.position[v1], self.position[v2] = j, i
        self._score += delta
        return self._score

    def random_start(self, rng=None):
        """Shuffle the values held by the free cells and return the new score."""
        if rng is None:
            rng = np.random.default_rng()
        self.board[self.free_cells] = rng.permutation(self.board[self.free_cells])
        self._reindex()
        return self._score

    def load(self, board):
        """Replace the grid by another full assignment with the same fixed cells."""
        board = np.array(board, dtype=int).ravel()
        if board.size != self.N * self.N:
            raise InvalidInput(f"expected {self.N * self.N} values, got {board.size}")
        if not np.array_equal(board[self.fixed], self.board[self.fixed]):
            raise InvalidInput("board does not keep the fixed cells")
        if not np.array_equal(np.sort(board), np.arange(1, board.size + 1)):
            raise InvalidInput(f"board is not a permutation of 1..{board.size}")
        self.board = board
        self._reindex()
