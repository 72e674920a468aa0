from pathlib import Path
import pandas as pd
from serpnav.metrics import AttemptResult, RunReport
from serpnav.retry import AttemptOutcome, RunState
from serpnav.storage import ensure_dirs, save_attempts, save_schema


def test_ensure_dirs_creates_layout(tmp_path: Path):
    dirs = ensure_dirs(tmp_path, extraction=True)
    assert set(dirs) == {"logs", "screenshots", "data"}
    assert all(p.is_dir() for p in dirs.values())


def test_ensure_dirs_skips_data_without_extraction(tmp_path: Path):
    ensure_dirs(tmp_path)
    assert not (tmp_path / "data").exists()


def test_save_schema_writes_pretty_json(tmp_path: Path):
    out = save_schema([{"@type": "Organization"}], "acme-corp.com", tmp_path, "2024-05-01T12:30:05.123Z")
    assert out.name == "schema-acme-corp_com-2024-05-01T12-30-05.123Z.json"
    assert out.read_text(encoding="utf-8") == '[\n  {\n    "@type": "Organization"\n  }\n]'


def test_save_attempts_writes_csv(tmp_path: Path):
    report = RunReport(
        state=RunState.SUCCEEDED,
        attempts=[
            AttemptResult(index=1, outcome=AttemptOutcome.ERROR, error_type="TimeoutError"),
            AttemptResult(index=2, outcome=AttemptOutcome.SUCCESS, clicked_url="https://acme-corp.com/"),
        ],
    )

    out = save_attempts(report, "attempts", tmp_path)

    df = pd.read_csv(out)
    assert list(df["outcome"]) == ["error", "success"]
    assert set(df["final_state"]) == {"succeeded"}


def test_save_attempts_skips_empty_report(tmp_path: Path):
    assert save_attempts(RunReport(state=RunState.EXHAUSTED), "attempts", tmp_path) is None
    assert not any(tmp_path.iterdir())
