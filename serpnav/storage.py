import json
from dataclasses import asdict
from pathlib import Path
import pandas as pd
from loguru import logger
from .metrics import RunReport
from .utils import iso_timestamp

LOGS_DIR = "logs"
SCREENSHOTS_DIR = "screenshots"
DATA_DIR = "data"
RESULTS_DIR = "results"


def ensure_dirs(root: Path, extraction: bool = False) -> dict[str, Path]:
    """
    Create logs/, screenshots/ and (for extraction runs) data/ under `root`.

    Errors are not caught here: failing to create the layout aborts the run.
    """
    names = [LOGS_DIR, SCREENSHOTS_DIR] + ([DATA_DIR] if extraction else [])
    dirs = {}
    for name in names:
        path = root / name
        path.mkdir(parents=True, exist_ok=True)
        dirs[name] = path
    return dirs


def schema_filename(domain: str, timestamp: str | None = None) -> str:
    timestamp = timestamp or iso_timestamp()
    return f"schema-{domain.replace('.', '_')}-{timestamp.replace(':', '-')}.json"


def save_schema(records, domain: str, data_dir: Path, timestamp: str | None = None) -> Path:
    """
    Persist extracted JSON-LD under data/schema-<domain>-<timestamp>.json.

    `records` is either the parsed record list or, when redaction broke the
    JSON, the raw redacted text; both are written JSON-encoded.
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    out_path = data_dir / schema_filename(domain, timestamp)
    out_path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
    return out_path


def save_attempts(report: RunReport, name: str, results_dir: Path) -> Path | None:
    """
    Persist the per-attempt summary as CSV under results/<name>.csv.

    One row per attempt (outcome, user agent, timing, clicked link, error),
    each tagged with the final run state.
    """
    if not report.attempts:
        return None

    df = pd.DataFrame([asdict(a) for a in report.attempts])
    df["outcome"] = df["outcome"].map(lambda o: o.value)
    df["final_state"] = report.state.value

    results_dir.mkdir(parents=True, exist_ok=True)
    out_path = results_dir / f"{name}.csv"
    df.to_csv(out_path, index=False)
    logger.info(f"Saved {out_path}")
    return out_path
