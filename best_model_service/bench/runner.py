#!/usr/bin/env python3
"""
Load generator for the best-model service.

Reads a YAML config listing runs against the service endpoints
(current-model, models, save-model) and, per concurrency level, writes:
  - <run>_raw.csv        one row per request
  - <run>_summary.csv    throughput / latency percentiles per level
  - combined_summary.csv all runs together (input for bench.analyze)

save-model runs post strictly increasing scores so that every level keeps
racing for the top spot, and count accepted vs rejected submissions.
"""

import argparse
import asyncio
import csv
import itertools
import os
import sys
import time
import uuid
from statistics import mean

import aiohttp
import yaml

RAW_FIELDS = ["run_label", "concurrency", "req_id", "ok", "status", "latency_ms", "accepted"]
SUMMARY_FIELDS = [
    "run_label", "concurrency", "requests", "ok", "errors", "accepted", "rejected",
    "elapsed_s", "throughput_rps", "latency_avg_ms",
    "latency_p50_ms", "latency_p95_ms", "latency_p99_ms",
]


# ------------------------------------------------------------
# Helper functions
def percentile(values, p):
    if not values:
        return float("nan")
    arr = sorted(values)
    k = (len(arr) - 1) * (p / 100.0)
    f = int(k)
    c = min(f + 1, len(arr) - 1)
    if f == c:
        return arr[f]
    return arr[f] + (arr[c] - arr[f]) * (k - f)


def load_yaml(path):
    with open(path, "r") as f:
        return yaml.safe_load(f)


class ScoreCounter:
    """Hands out strictly increasing scores starting above ``start``."""

    def __init__(self, start=0.0, step=1.0):
        self._it = itertools.count(1)
        self.start = start
        self.step = step

    def next(self):
        return self.start + next(self._it) * self.step


# ------------------------------------------------------------
async def one_request(session, method, url, json_body, timeout_s):
    timeout = aiohttp.ClientTimeout(total=timeout_s)
    t0 = time.perf_counter()
    try:
        if method.upper() == "GET":
            async with session.get(url, timeout=timeout) as resp:
                body = await resp.json(content_type=None)
                status = resp.status
        else:
            async with session.post(url, json=json_body, timeout=timeout) as resp:
                body = await resp.json(content_type=None)
                status = resp.status
        t1 = time.perf_counter()
        accepted = None
        if isinstance(body, dict) and "success" in body:
            accepted = bool(body["success"])
        return {
            "ok": (200 <= status < 300),
            "status": status,
            "latency_ms": (t1 - t0) * 1000.0,
            "accepted": accepted,
        }
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        t1 = time.perf_counter()
        return {"ok": False, "status": -1, "latency_ms": (t1 - t0) * 1000.0,
                "accepted": None, "error": repr(e)}


def summarize(run_label, concurrency, results, elapsed):
    latencies = [r["latency_ms"] for r in results]
    ok_count = sum(1 for r in results if r["ok"])
    return {
        "run_label": run_label,
        "concurrency": concurrency,
        "requests": len(results),
        "ok": ok_count,
        "errors": len(results) - ok_count,
        "accepted": sum(1 for r in results if r["accepted"] is True),
        "rejected": sum(1 for r in results if r["accepted"] is False),
        "elapsed_s": elapsed,
        "throughput_rps": ok_count / elapsed if elapsed > 0 else 0.0,
        "latency_avg_ms": mean(latencies) if latencies else float("nan"),
        "latency_p50_ms": percentile(latencies, 50),
        "latency_p95_ms": percentile(latencies, 95),
        "latency_p99_ms": percentile(latencies, 99),
    }


async def run_level(session, method, url, body_fn, timeout_s, concurrency, total_requests, writer, run_label):
    results = []
    sem = asyncio.Semaphore(concurrency)
    t_start = time.perf_counter()

    async def worker(req_id):
        async with sem:
            res = await one_request(session, method, url, body_fn(), timeout_s)
            results.append(res)
            writer.writerow({
                "run_label": run_label,
                "concurrency": concurrency,
                "req_id": req_id,
                "ok": int(res["ok"]),
                "status": res["status"],
                "latency_ms": f"{res['latency_ms']:.3f}",
                "accepted": "" if res["accepted"] is None else int(res["accepted"]),
            })

    tasks = [asyncio.create_task(worker(str(uuid.uuid4()))) for _ in range(total_requests)]
    await asyncio.gather(*tasks)

    elapsed = time.perf_counter() - t_start
    return summarize(run_label, concurrency, results, elapsed)


async def current_score(session, base_url, timeout_s, name=None):
    params = {"name": name} if name else None
    async with session.get(f"{base_url}/api/current-model", params=params,
                           timeout=aiohttp.ClientTimeout(total=timeout_s)) as resp:
        resp.raise_for_status()
        j = await resp.json(content_type=None)
    return float(j.get("score", 0))


def body_factory(run, counter):
    kind = run.get("kind", "get")
    if kind != "save":
        return lambda: None
    name = run.get("model_name")
    payload = run.get("payload", {})

    def make():
        body = {"score": counter.next(), "data": payload}
        if name:
            body["name"] = name
        return body
    return make


def write_summary(path, rows):
    with open(path, "w", newline="") as f:
        w = csv.DictWriter(f, fieldnames=SUMMARY_FIELDS)
        w.writeheader()
        for s in rows:
            w.writerow(s)


# ------------------------------------------------------------
async def run_all(cfg):
    base_url = cfg.get("base_url", "http://localhost:3000").rstrip("/")
    outdir = cfg.get("output_dir", "./bench_runs")
    os.makedirs(outdir, exist_ok=True)
    timeout_s = float(cfg.get("timeout_seconds", 30.0))

    all_rows = []
    async with aiohttp.ClientSession() as session:
        for run in cfg["runs"]:
            name = run["name"]
            kind = run.get("kind", "get")
            method = "POST" if kind == "save" else "GET"
            url = f"{base_url}{run['path']}"
            conc_levels = run.get("concurrency_levels", [1, 2, 4, 8])
            per_level = int(run.get("requests_per_level", 100))

            counter = None
            if kind == "save":
                start = await current_score(session, base_url, timeout_s, run.get("model_name"))
                counter = ScoreCounter(start=start, step=float(run.get("score_step", 1.0)))
            body_fn = body_factory(run, counter)

            print(f"[run:{name}] -> {url} ({method})")

            raw_path = os.path.join(outdir, f"{name}_raw.csv")
            with open(raw_path, "w", newline="") as fraw:
                writer = csv.DictWriter(fraw, fieldnames=RAW_FIELDS)
                writer.writeheader()
                summaries = []

                for c in conc_levels:
                    print(f"  [concurrency={c}] running {per_level} requests ...")
                    s = await run_level(session, method, url, body_fn, timeout_s, c, per_level, writer, name)
                    summaries.append(s)
                    print(f"    throughput={s['throughput_rps']:.2f} rps, p95={s['latency_p95_ms']:.1f} ms, "
                          f"accepted={s['accepted']} rejected={s['rejected']}")

            write_summary(os.path.join(outdir, f"{name}_summary.csv"), summaries)
            all_rows.extend(summaries)

    combined_path = os.path.join(outdir, "combined_summary.csv")
    write_summary(combined_path, all_rows)
    print(f"\n[saved] combined_summary.csv -> {combined_path}")
    return all_rows


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("-c", "--config", default="bench.yaml")
    args = ap.parse_args(argv)
    try:
        asyncio.run(run_all(load_yaml(args.config)))
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
