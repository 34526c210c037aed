#!/usr/bin/env python3
import argparse
import os

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402

sns.set(style="whitegrid", font_scale=1.2)

METRICS = [
    ("throughput_rps", "Throughput (req/s)", "Throughput vs Concurrency"),
    ("latency_avg_ms", "Average Latency (ms)", "Average Latency vs Concurrency"),
    ("latency_p95_ms", "P95 Latency (ms)", "95th Percentile Latency vs Concurrency"),
    ("latency_p99_ms", "P99 Latency (ms)", "99th Percentile Latency vs Concurrency"),
]


def plot_metric(df, metric, ylabel, title, outfile):
    """One line per endpoint; concurrency levels double, so x is log2."""
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.lineplot(data=df, x="concurrency", y=metric, hue="run_label",
                 style="run_label", markers=True, dashes=False, ax=ax)
    if df["concurrency"].min() > 0:
        ax.set_xscale("log", base=2)
    ax.set(title=title, xlabel="Concurrency Level", ylabel=ylabel)
    ax.legend(title="Endpoint")
    fig.tight_layout()
    fig.savefig(outfile, dpi=160)
    plt.close(fig)
    print(f"[saved] {outfile}")


def acceptance_table(df):
    """Accepted/rejected save-model counts per run and concurrency level."""
    saves = df[df["accepted"].fillna(0) + df["rejected"].fillna(0) > 0]
    return saves.groupby(["run_label", "concurrency"])[["accepted", "rejected"]].sum().reset_index()


def plot_all(csv_path, outdir):
    os.makedirs(outdir, exist_ok=True)
    df = pd.read_csv(csv_path)
    print(f"[info] Loaded {len(df)} rows from {csv_path}")

    written = []
    for metric, ylabel, title in METRICS:
        outfile = os.path.join(outdir, f"{metric}.png")
        plot_metric(df, metric, ylabel, title, outfile)
        written.append(outfile)

    table = acceptance_table(df)
    if not table.empty:
        outfile = os.path.join(outdir, "save_acceptance.csv")
        table.to_csv(outfile, index=False)
        print(f"[saved] {outfile}")
        written.append(outfile)
    return written


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--csv", default="./bench_runs/combined_summary.csv")
    ap.add_argument("--outdir", default="./bench_plots")
    args = ap.parse_args(argv)
    plot_all(args.csv, args.outdir)


if __name__ == "__main__":
    main()
