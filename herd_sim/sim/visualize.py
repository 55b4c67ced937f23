# herd_sim/sim/visualize.py
from __future__ import annotations
import matplotlib.pyplot as plt

from .config import ARENA

def snapshot(sim, title: str = "", path: str | None = None):
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.set_xlim(ARENA.exit_x, ARENA.safety_x)
    ax.set_ylim(ARENA.height, 0)   # screen coordinates: y grows downward
    ax.axvline(ARENA.safety_x, color="green", linestyle="--", alpha=0.5)

    farms = sim.world.farms
    if farms:
        colors = ["#7cb342", "#ff9999", "#ff3333"]
        ax.scatter([f.x for f in farms], [f.y for f in farms],
                   c=[colors[min(f.damage_level, 2)] for f in farms],
                   marker="s", s=200, label="Farms")
    houses = sim.world.houses
    if houses:
        ax.scatter([h.x for h in houses], [h.y for h in houses], c="saddlebrown", marker="^", s=120, label="Houses")
    for d in sim.deterrents:
        if not d.active:
            continue
        ax.add_patch(plt.Circle((d.x, d.y), d.range, color="red", alpha=0.15))
        ax.plot(d.x, d.y, "x", color="red")
    herd = [e for e in sim.elephants if e.active]
    if herd:
        ax.scatter([e.x for e in herd], [e.y for e in herd],
                   c=["orange" if e.abandoned else "gray" for e in herd], s=40, label="Elephants")
    vill = [v for v in sim.villagers if v.active]
    if vill:
        ax.scatter([v.x for v in vill], [v.y for v in vill], c="blue", s=15, label="Villagers")

    ax.set_title(title or f"Level {sim.state.current_level + 1} herd {sim.state.current_herd + 1}")
    ax.legend(loc="upper left")
    plt.tight_layout()
    if path:
        fig.savefig(path, dpi=120)
        plt.close(fig)
    else:
        plt.show()
