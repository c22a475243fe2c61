import argparse
import csv
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import pandas as pd
from dotenv import load_dotenv

load_dotenv()

from talentmatch.config import load_settings
from talentmatch.orchestrator import MatchingOrchestrator
from talentmatch.services.ai_augmentation import AIAugmentationService
from talentmatch.services.data_provider import DEFAULT_CANDIDATES_JSON, DEFAULT_JOBS_JSON, JSONDataProvider


FIELDNAMES = [
    "run_id",
    "timestamp_utc",
    "job_id",
    "candidate_id",
    "job_title",
    "company",
    "candidate_name",
    "enable_ai",
    "llm_provider",
    "llm_model",
    "overall_score",
    "skill_match_score",
    "experience_score",
    "transferable_skills_score",
    "potential_score",
    "confidence",
    "augmentation_status",
    "matched_count",
    "related_count",
    "missing_count",
    "gaps_count",
    "matched_skills_json",
    "related_skills_json",
    "missing_skills_json",
    "risk_factors_json",
    "recommendations_json",
    "explanation",
    "elapsed_ms",
    "error",
]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _json_dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _existing_pairs(csv_path: Path) -> Set[Tuple[str, str]]:
    if not csv_path.exists():
        return set()
    with csv_path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return {
            (row.get("job_id", "") or "", row.get("candidate_id", "") or "")
            for row in reader
            if row
        }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Matches every candidate against every job and writes a CSV with "
            "scores, confidence and explanation for each pair."
        )
    )
    parser.add_argument("--jobs", default=str(DEFAULT_JOBS_JSON), help="JSON file with the jobs.")
    parser.add_argument("--candidates", default=str(DEFAULT_CANDIDATES_JSON), help="JSON file with the candidates.")
    parser.add_argument("--out", default="data/ranking/batch_results.csv", help="Output CSV path.")
    parser.add_argument("--limit", type=int, default=0, help="If > 0, stop after this many pairs.")
    parser.add_argument("--skip-existing", action="store_true", help="Skip pairs already in the output CSV.")
    parser.add_argument("--verbose", action="store_true", help="Verbose orchestrator logs.")
    parser.add_argument("--current-year", type=int, default=None, help="Reference year for education recency.")

    parser.add_argument("--enable-ai", action=argparse.BooleanOptionalAction, default=None, help="Run AI augmentation (default: TALENTMATCH_ENABLE_AI).")
    parser.add_argument("--llm-provider", choices=["openai", "lmstudio", "ollama"], default=None)
    parser.add_argument("--llm-model", default=None)

    args = parser.parse_args(argv)

    project_root = Path(__file__).resolve().parent
    out_path = (project_root / args.out).resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)

    settings = load_settings()
    if args.llm_provider:
        settings.llm_provider = args.llm_provider
    if args.llm_model:
        settings.llm_model = args.llm_model
    enable_ai = settings.enable_ai if args.enable_ai is None else args.enable_ai

    provider = JSONDataProvider.from_files(args.jobs, args.candidates, verbose=args.verbose)
    jobs = provider.list_jobs()
    candidates = provider.list_candidates()
    if not jobs:
        raise SystemExit(f"No jobs found in: {args.jobs}")
    if not candidates:
        raise SystemExit(f"No candidates found in: {args.candidates}")

    ai_service = AIAugmentationService.from_settings(settings) if enable_ai else None
    orchestrator = MatchingOrchestrator(
        data_provider=provider,
        ai_service=ai_service,
        enable_ai=enable_ai,
        current_year=args.current_year,
        verbose=args.verbose,
    )

    existing = _existing_pairs(out_path) if args.skip_existing else set()
    write_header = not out_path.exists()
    processed = 0

    with out_path.open("a", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        if write_header:
            writer.writeheader()

        for job in jobs:
            for candidate in candidates:
                if args.limit and processed >= args.limit:
                    break
                if (job.id, candidate.id) in existing:
                    continue

                started = time.perf_counter()
                row: Dict[str, Any] = {name: "" for name in FIELDNAMES}
                row.update({
                    "run_id": f"{job.id}__{candidate.id}__{int(time.time())}",
                    "timestamp_utc": _utc_now_iso(),
                    "job_id": job.id,
                    "candidate_id": candidate.id,
                    "job_title": job.title,
                    "company": job.company,
                    "candidate_name": candidate.name,
                    "enable_ai": enable_ai,
                    "llm_provider": settings.llm_provider if enable_ai else "",
                    "llm_model": ai_service.llm_service.model if ai_service else "",
                })

                try:
                    result = orchestrator.match(job.id, candidate.id)
                    score = result.score
                    breakdown = score.breakdown

                    row["overall_score"] = score.overall_score
                    row["skill_match_score"] = score.skill_match_score
                    row["experience_score"] = score.experience_score
                    row["transferable_skills_score"] = score.transferable_skills_score
                    row["potential_score"] = score.potential_score
                    row["confidence"] = result.confidence
                    row["augmentation_status"] = result.augmentation_status

                    row["matched_count"] = len(breakdown.matched_skills)
                    row["related_count"] = len(breakdown.related_skills)
                    row["missing_count"] = len(breakdown.missing_skills)
                    row["gaps_count"] = len(breakdown.experience_gaps)

                    row["matched_skills_json"] = _json_dumps(breakdown.matched_skills)
                    row["related_skills_json"] = _json_dumps(breakdown.related_skills)
                    row["missing_skills_json"] = _json_dumps(breakdown.missing_skills)
                    row["risk_factors_json"] = _json_dumps(breakdown.risk_factors)
                    row["recommendations_json"] = _json_dumps(result.recommendations)
                    row["explanation"] = result.explanation

                except Exception as e:
                    row["error"] = f"{type(e).__name__}: {e}"
                finally:
                    row["elapsed_ms"] = int((time.perf_counter() - started) * 1000)
                    writer.writerow(row)
                    f.flush()
                    processed += 1
                    pair_label = f"{candidate.id} x {job.id}"
                    if row["error"]:
                        print(f"  [{processed}] ERROR {pair_label}: {row['error']}")
                    else:
                        print(f"  [{processed}] OK {pair_label} -> score={row['overall_score']}")

    # ═══════════════════════════════════════════════════════════════
    # Summary statistics
    # ═══════════════════════════════════════════════════════════════
    stats_path = out_path.parent / f"{out_path.stem}_stats.csv"
    _generate_ranking_stats(out_path, stats_path)

    return 0


# ═══════════════════════════════════════════════════════════════════════
# STATS GENERATION
# ═══════════════════════════════════════════════════════════════════════

def _generate_ranking_stats(csv_path: Path, stats_path: Path) -> None:
    """Per-job and global score statistics, written as section/metric/value rows."""
    if not csv_path.exists():
        return

    df = pd.read_csv(csv_path, keep_default_na=False)
    if df.empty:
        print("\nNo results in the CSV.")
        return

    ok = df[df["error"] == ""].copy()
    for column in ("overall_score", "confidence", "elapsed_ms"):
        ok[column] = pd.to_numeric(ok[column], errors="coerce")

    stats: List[Dict[str, Any]] = []

    def _add(section: str, metric: str, value: Any) -> None:
        stats.append({"section": section, "metric": metric, "value": value})

    _add("general", "total_pairs", len(df))
    _add("general", "ok_pairs", len(ok))
    _add("general", "error_pairs", len(df) - len(ok))

    if not ok.empty:
        scores = ok["overall_score"]
        _add("score", "mean", f"{scores.mean():.3f}")
        _add("score", "median", f"{scores.median():.3f}")
        _add("score", "std", f"{scores.std(ddof=0):.3f}")
        _add("score", "min", f"{scores.min():.2f}")
        _add("score", "max", f"{scores.max():.2f}")
        _add("confidence", "mean", f"{ok['confidence'].mean():.3f}")

        buckets = pd.cut(scores, bins=[0, 0.25, 0.5, 0.75, 1.0], include_lowest=True).value_counts().sort_index()
        for interval, count in buckets.items():
            _add("distribution", str(interval), int(count))

        for status, count in ok["augmentation_status"].value_counts().items():
            _add("augmentation", status, int(count))

        for job_id, group in ok.groupby("job_id", sort=True):
            best = group.sort_values("overall_score", ascending=False, kind="stable").iloc[0]
            _add("per_job", f"{job_id}|mean", f"{group['overall_score'].mean():.3f}")
            _add("per_job", f"{job_id}|best_candidate", best["candidate_id"])
            _add("per_job", f"{job_id}|best_score", f"{best['overall_score']:.2f}")

        _add("timing", "mean_ms", f"{ok['elapsed_ms'].mean():.0f}")
        _add("timing", "total_s", f"{ok['elapsed_ms'].sum() / 1000:.1f}")

    pd.DataFrame(stats, columns=["section", "metric", "value"]).to_csv(stats_path, index=False)

    print("\n" + "=" * 70)
    print("  SUMMARY - Batch Ranking Results")
    print("=" * 70)
    print(f"  Pairs: {len(df)} total ({len(ok)} OK, {len(df) - len(ok)} errors)")
    if not ok.empty:
        print(f"  Score: mean={scores.mean():.2f}  median={scores.median():.2f}  "
              f"min={scores.min():.2f}  max={scores.max():.2f}")
    print(f"  Output CSV: {csv_path}")
    print(f"  Stats CSV:  {stats_path}")
    print("=" * 70)


if __name__ == "__main__":
    raise SystemExit(main())
