import pandas as pd
import pytest

from evalboard.data import build_data_context, normalize_records

RAW_SESSIONS = [
    {
        "Subject": "Algebra ",
        "College": "A",
        "Sem": "1",
        "ContentScore": "8",
        "TrainerScore": "7",
        "Curriculum": "Core",
        "ActionItems": "Review homework",
    },
    {
        "Subject": "Algebra",
        "College": "A",
        "Sem": 1,
        "ContentScore": None,
        "TrainerScore": 9,
        "Curriculum": "Core",
        "ActionItems": "  ",
    },
    {
        "Subject": "Physics",
        "College": "B",
        "Sem": "2",
        "ContentScore": "9.5",
        "TrainerScore": "5.5",
        "Curriculum": "Elective",
        "ActionItems": None,
    },
    {
        "Subject": "Chemistry",
        "College": "C",
        "Sem": "Summer",
        "ContentScore": "6",
        "TrainerScore": "n/a",
        "Curriculum": "Core",
        "ActionItems": "More labs",
    },
    {
        "Subject": "Physics",
        "College": "B",
        "Sem": "3",
        "ContentScore": 0,
        "TrainerScore": "8.2",
        "Curriculum": "Elective",
        "ActionItems": "",
    },
]


@pytest.fixture
def raw_sessions():
    return [dict(r) for r in RAW_SESSIONS]


@pytest.fixture
def records(raw_sessions):
    df, _ = normalize_records(raw_sessions)
    return df


@pytest.fixture
def data_ctx(records):
    return build_data_context(records, files=["fixture"])


@pytest.fixture
def sessions_csv(tmp_path, raw_sessions, monkeypatch):
    path = tmp_path / "sessions.csv"
    pd.DataFrame(raw_sessions).to_csv(path, index=False)
    monkeypatch.setenv("EVALBOARD_DATA_PATH", str(path))
    return path
