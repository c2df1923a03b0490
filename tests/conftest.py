import os
import tempfile

# Settings and the engine are built at import time, so the environment has to
# be in place before anything from cfcoach is imported.
_db_dir = tempfile.mkdtemp(prefix="cfcoach-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_db_dir}/test.db"
os.environ["DEEPSEEK_API_KEY"] = ""
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["DEMO_MODE"] = "false"

import pytest

from cfcoach.analysis import ProblemId, SubmissionRecord, Verdict


def make_submission(
	contest_id=1,
	index="A",
	verdict=Verdict.ACCEPTED,
	tags=(),
	rating=None,
	language="GNU C++17",
	submitted_at=1_700_000_000,
):
	return SubmissionRecord(
		problem_id=ProblemId(contest_id=contest_id, index=index),
		verdict=verdict,
		tags=tuple(tags),
		rating=rating,
		language=language,
		submitted_at=submitted_at,
	)


@pytest.fixture
def submission():
	return make_submission
