import numpy as np
import matplotlib.pyplot as plt


def plot_score_curve(result):
    steps = np.arange(len(result.scores))

    fig, ax = plt.subplots(figsize=(6, 3))

    ax.plot(steps, result.scores, color='steelblue', linewidth=1.5, label='score')
    if result.escape_indices:
        esc = np.asarray(result.escape_indices)
        ax.scatter(esc, result.scores[esc], marker='x', s=20, color='coral', zorder=3, label='escape')
    ax.axhline(result.max_score, color="green", linestyle="--", linewidth=1, label=f"perfect ({result.max_score})")

    ax.set_xlabel('Step')
    ax.set_ylabel('Score')
    ax.set_title(f'Score trace (N={result.N}, best={result.best_score})')
    ax.grid(True, alpha=0.3)
    ax.legend(loc='lower right')

    plt.tight_layout()
    plt.show()
    return fig


def plot_score_curve_average(N, scores_matrix, mean_score, std_score):
    fig = plt.figure(figsize=(6, 3))
    steps = np.arange(mean_score.size)

    # Individual runs in the background
    num_runs = scores_matrix.shape[0]
    for i in range(num_runs):
        plt.plot(scores_matrix[i], alpha=0.3, linewidth=0.8, color='gray', label='individual runs' if i == 0 else '')

    plt.plot(mean_score, label='mean score', linewidth=2, color='steelblue')
    plt.fill_between(
        steps,
        np.clip(mean_score - std_score, a_min=0, a_max=None),
        np.clip(mean_score + std_score, a_min=None, a_max=N * N - 1),
        alpha=0.15,
    )
    plt.xlabel('Step')
    plt.ylabel('Score')
    plt.title(f'Average score trace over {num_runs} runs (N={N})')
    plt.grid(True, alpha=0.3)
    plt.legend()
    plt.tight_layout()
    plt.show()
    return fig


def plot_perfect_rate_vs_N(result):
    Ns = result["N_values"]
    all_best_scores = result["all_best_scores"]
    max_scores = result["max_scores"]
    runs = result["runs"]

    fig, (ax, ax_rate) = plt.subplots(2, 1, figsize=(8, 6), sharex=True)

    # Best score of each run, as a fraction of the perfect score
    for idx, N in enumerate(Ns):
        fractions = np.asarray(all_best_scores[idx]) / max(max_scores[idx], 1)
        ax.scatter([N] * len(fractions), fractions, alpha=0.4, s=30, color='gray', zorder=1)

    mean_fractions = [np.mean(scores) / max(m, 1) for scores, m in zip(all_best_scores, max_scores)]
    ax.plot(Ns, mean_fractions, marker='o', color='steelblue', linewidth=2,
            markersize=8, label='mean best score / perfect', zorder=3)
    ax.axhline(1.0, color="green", linestyle="--", linewidth=1, label="perfect")
    ax.set_ylabel("Best score / perfect")
    ax.set_title(f"Best score vs N ({result['escape']}, {runs} runs per N)")
    ax.grid(True, alpha=0.3)
    ax.legend()

    rates = 100.0 * np.asarray(result["num_perfect"]) / runs
    ax_rate.bar(Ns, rates, color='seagreen', alpha=0.7)
    ax_rate.set_xlabel("Board size N")
    ax_rate.set_ylabel("Perfect runs %")
    ax_rate.set_ylim(0, 100)
    ax_rate.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.show()
    return fig
