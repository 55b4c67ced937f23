#!/usr/bin/env python3
"""
Analyze UI CSVs produced by HerdCsvLogger.

Features:
  - --session latest|<id> filters to a single run (so you never need to delete runs/)
  - Saves timestamped CSV exports and PNG plots under --outdir
  - Campaign plot:
      (1) Saved / lost totals per herd boundary
      (2) Success rate against the win threshold
      (3) Budget & destroyed farms
  - Cue plot: how often each cue fired (per session)
Usage examples:
  python analyze_ui_csv.py --herds runs/ui_herds.csv \
                           --cues runs/ui_cues.csv \
                           --outdir reports \
                           --tag demo \
                           --session latest
"""
import argparse
import os
import sys
import time
import pandas as pd

# Use non-interactive backend for headless operation
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

WIN_RATE = 0.6

NUMERIC = ("tick", "time_s", "level", "herd", "budget", "saved", "lost", "spawned",
           "damaged_farms", "success_rate", "deterrents",
           "x_min", "x_q25", "x_median", "x_q75", "x_max")


# ------------------------- utilities -------------------------
def ensure_dir(p: str) -> None:
    os.makedirs(p, exist_ok=True)

def timestamp(tag: str | None = None) -> str:
    t = time.strftime("%Y%m%d_%H%M%S")
    return f"{t}__{tag}" if tag else t

def exists(path: str | None) -> bool:
    return bool(path and os.path.exists(path))


# ------------------------- loading ---------------------------
def load_csvs(herds_path: str, cues_path: str | None):
    if not exists(herds_path):
        print(
            "\n[ERROR] Herds CSV not found.\n"
            f"  Expected: {herds_path}\n"
            "Hints:\n"
            "  - Run the UI until at least one herd completes.\n"
            "  - Confirm the logger paths in herd_sim/ui/app.py match these args.\n",
            file=sys.stderr
        )
        sys.exit(1)

    df_herds = pd.read_csv(herds_path)
    df_cues = pd.read_csv(cues_path) if (cues_path and exists(cues_path)) else None
    return df_herds, df_cues


def _latest_session_id(df: pd.DataFrame) -> str | None:
    """Return the last session_id in file order (used by --session latest)."""
    if "session_id" not in df.columns or len(df) == 0:
        return None
    s = df["session_id"].dropna()
    return s.iloc[-1] if len(s) else None


def clean_herds(df_herds: pd.DataFrame) -> pd.DataFrame:
    d = df_herds.copy()
    for col in NUMERIC:
        if col in d.columns:
            d[col] = pd.to_numeric(d[col], errors="coerce")
    # one continuous x axis across levels: 1.1, 1.2, ..., 2.1
    if {"level", "herd"} <= set(d.columns):
        d["step"] = range(1, len(d) + 1)
        d["label"] = d["level"].astype("Int64").astype(str) + "." + d["herd"].astype("Int64").astype(str)
    return d.sort_values("tick") if "tick" in d.columns else d


def cue_counts(df_cues: pd.DataFrame | None) -> pd.DataFrame:
    if df_cues is None or len(df_cues) == 0 or "cue" not in df_cues.columns:
        return pd.DataFrame()
    keys = ["session_id", "cue"] if "session_id" in df_cues.columns else ["cue"]
    return (df_cues.groupby(keys, as_index=False)
                   .size()
                   .rename(columns={"size": "count"})
                   .sort_values(keys))


# ------------------------- plotting --------------------------
def plot_campaign(df: pd.DataFrame, outdir: str, tag: str | None):
    ensure_dir(outdir)
    if len(df) == 0:
        print("[INFO] No herd rows to plot.")
        return
    fig, ax = plt.subplots(3, 1, figsize=(10, 11), sharex=True)
    x = df["step"] if "step" in df.columns else range(len(df))

    # (1) saved / lost
    if "saved" in df.columns:
        ax[0].plot(x, df["saved"], label="Saved", color="tab:green", linewidth=2.0)
    if "lost" in df.columns:
        ax[0].plot(x, df["lost"], label="Lost", color="tab:red", linewidth=2.0)
    if "spawned" in df.columns:
        ax[0].plot(x, df["spawned"], label="Spawned", color="black", linestyle=":")
    ax[0].set_ylabel("Elephants")
    ax[0].legend(loc="best")
    ax[0].grid(alpha=0.25)

    # (2) success rate
    if "success_rate" in df.columns:
        ax[1].plot(x, df["success_rate"] * 100, label="Success rate", color="tab:blue")
    ax[1].axhline(WIN_RATE * 100, color="gray", linestyle="--", label="Win threshold")
    ax[1].set_ylabel("%")
    ax[1].set_ylim(0, 105)
    ax[1].legend(loc="best")
    ax[1].grid(alpha=0.25)

    # (3) budget & farms
    if "budget" in df.columns:
        ax[2].plot(x, df["budget"], label="Budget (Rs.)", color="tab:olive")
    ax[2].set_ylabel("Budget")
    ax[2].grid(alpha=0.25)
    if "damaged_farms" in df.columns:
        ax2 = ax[2].twinx()
        ax2.step(x, df["damaged_farms"], where="post", color="tab:brown", label="Destroyed farms")
        ax2.set_ylabel("Destroyed farms")
        ax2.legend(loc="upper right")
    ax[2].legend(loc="upper left")
    if "label" in df.columns:
        ax[2].set_xticks(list(x))
        ax[2].set_xticklabels(df["label"], rotation=45)
    ax[2].set_xlabel("Level.Herd")

    fig.tight_layout()
    png = os.path.join(outdir, f"campaign_trends_{timestamp(tag)}.png")
    fig.savefig(png, dpi=160)
    plt.close(fig)
    print(f"[OK] Saved {png}")


def plot_cues(counts: pd.DataFrame, outdir: str, tag: str | None):
    if len(counts) == 0:
        print("[INFO] No cue rows; skipping cue plot.")
        return
    ensure_dir(outdir)
    agg = counts.groupby("cue", as_index=False)["count"].sum().sort_values("count")
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.barh(agg["cue"], agg["count"], color="tab:gray")
    ax.set_xlabel("Count")
    ax.grid(alpha=0.25, axis="x")
    fig.tight_layout()
    png = os.path.join(outdir, f"cue_counts_{timestamp(tag)}.png")
    fig.savefig(png, dpi=160)
    plt.close(fig)
    print(f"[OK] Saved {png}")


# ------------------------- exports (optional) -----------------
def export_csv(df: pd.DataFrame, outdir: str, base: str, tag: str | None) -> str:
    ensure_dir(outdir)
    fname = f"{base}_{timestamp(tag)}.csv"
    path = os.path.join(outdir, fname)
    df.to_csv(path, index=False)
    print(f"[OK] Wrote {path}")
    return path


# ------------------------- main ------------------------------
def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--herds", type=str, default="runs/ui_herds.csv",
                    help="Path to per-herd CSV written by the UI")
    ap.add_argument("--cues", type=str, default="runs/ui_cues.csv",
                    help="Path to cue CSV (pass '' to disable)")
    ap.add_argument("--outdir", type=str, default="reports",
                    help="Output directory for plots and exported CSVs")
    ap.add_argument("--tag", type=str, default="",
                    help="Optional label to append to filenames (e.g., 'fences')")
    ap.add_argument("--session", type=str, default="",
                    help="Session ID to analyze; use 'latest' to pick the most recent session automatically.")
    args = ap.parse_args()

    df_herds_raw, df_cues_raw = load_csvs(args.herds, args.cues if args.cues else None)

    df_herds = df_herds_raw.copy()
    df_cues = df_cues_raw.copy() if df_cues_raw is not None else None

    if args.session:
        if "session_id" not in df_herds.columns:
            print("[WARN] --session provided but herds CSV has no session_id; ignoring.")
        else:
            sid = args.session
            if sid == "latest":
                sid = _latest_session_id(df_herds_raw)
            if sid:
                df_herds = df_herds[df_herds["session_id"] == sid].copy()
                if df_cues is not None and "session_id" in df_cues.columns:
                    df_cues = df_cues[df_cues["session_id"] == sid].copy()
                print(f"[OK] Filtering analysis to session_id={sid}")
            else:
                print("[WARN] Could not resolve latest session_id; analyzing all data.")

    print(f"[INFO] Herd rows after filter: {len(df_herds)}")
    if df_cues is not None:
        print(f"[INFO] Cue rows after filter: {len(df_cues)}")

    herds_clean = clean_herds(df_herds)
    export_csv(herds_clean, args.outdir, base="herd_summary", tag=(args.tag or None))

    counts = cue_counts(df_cues)
    if len(counts) > 0:
        export_csv(counts, args.outdir, base="cue_summary", tag=(args.tag or None))

    plot_campaign(herds_clean, args.outdir, tag=(args.tag or None))
    plot_cues(counts, args.outdir, tag=(args.tag or None))

    print(f"\nDone. Outputs are in: {args.outdir}")

if __name__ == "__main__":
    main()
