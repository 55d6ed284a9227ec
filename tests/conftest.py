import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src to sys.path so we can import exam_engine
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

# Qt adapter tests run headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from exam_engine.core.models import Assessment, Question, QuestionType  # noqa: E402
from exam_engine.persistence import JsonFileGateway  # noqa: E402
from exam_engine.session import EngineConfig  # noqa: E402


class FakeClock:
    """Settable clock; advance() moves it forward by whole seconds."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


# Common test fixtures
@pytest.fixture
def t0():
    return datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(t0):
    return FakeClock(t0)


@pytest.fixture
def capital_question():
    return Question(
        id="q1",
        text="What is the capital of France?",
        type=QuestionType.MULTIPLE_CHOICE,
        marks=5,
        options=("A. Paris", "B. Lyon", "C. Nice"),
        correct_answers=frozenset({"Paris"}),
    )


@pytest.fixture
def colour_question():
    return Question(
        id="q2",
        text="What colour is the sky?",
        type=QuestionType.MULTIPLE_CHOICE,
        marks=3,
        options=("A. Blue", "B. Green"),
        correct_answers=frozenset({"Blue"}),
    )


@pytest.fixture
def questions(capital_question, colour_question):
    return [capital_question, colour_question]


@pytest.fixture
def assessment(questions):
    return Assessment(
        id="a1",
        title="Geography Quiz",
        unit_code="GEO101",
        question_ids=tuple(q.id for q in questions),
        duration_minutes=1,
    )


@pytest.fixture
def store(tmp_path: Path):
    return JsonFileGateway(tmp_path / "exam_data")


@pytest.fixture
def sync_config(tmp_path: Path):
    return EngineConfig(data_dir=tmp_path / "exam_data", synchronous_persistence=True)
