"""
Visualization utilities for the afforestation planner.

Plots the per-generation best fitness of a run, marking restarts.
"""

import math
from pathlib import Path
from typing import Tuple, Union

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


def plot_fitness_history(
    history: list[float],
    output_path: Union[str, Path],
    title: str = "GA convergence",
    figsize: Tuple[int, int] = (10, 6)
) -> Path:
    """
    Save a convergence plot of generation best fitness.

    Infeasible generations (-inf) are left as gaps and marked along the
    bottom axis.

    Args:
        history: Best fitness of every generation
        output_path: Path to save PNG file
        title: Plot title
        figsize: Figure size (width, height) in inches

    Returns:
        Path to the saved plot
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    generations = list(range(len(history)))
    feasible = [f if math.isfinite(f) else float('nan') for f in history]
    infeasible = [g for g, f in zip(generations, history) if not math.isfinite(f)]

    running_best = []
    best = -math.inf
    for f in history:
        best = max(best, f)
        running_best.append(best if math.isfinite(best) else float('nan'))

    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(generations, feasible, color='tab:green', linewidth=0.8, label='Generation best')
    ax.plot(generations, running_best, color='tab:blue', linewidth=1.5, label='Best so far')

    if infeasible:
        ax.plot(infeasible, [0] * len(infeasible), '|', color='tab:red',
                transform=ax.get_xaxis_transform(), label='All infeasible')

    ax.set_xlabel('Generation')
    ax.set_ylabel('Fitness (per-capita score x 100)')
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend(loc='lower right')

    fig.tight_layout()
    fig.savefig(output_path, dpi=100)
    plt.close(fig)

    return output_path
