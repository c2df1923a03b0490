"""Aggregate statistics over a Codeforces handle's submission history.

`analyze` consumes the submission records once and derives per-problem attempt
state, then the tag/rating/language histograms and the ranked views used by
the prompt and fallback synthesizers. It performs no I/O.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


TOP_TAGS_LIMIT = 10
WEAK_TAGS_LIMIT = 5
TOP_LANGUAGES_LIMIT = 5


class Verdict(str, Enum):
	ACCEPTED = "OK"
	WRONG_ANSWER = "WRONG_ANSWER"
	TIME_LIMIT_EXCEEDED = "TIME_LIMIT_EXCEEDED"
	RUNTIME_ERROR = "RUNTIME_ERROR"
	COMPILATION_ERROR = "COMPILATION_ERROR"
	OTHER = "OTHER"

	@classmethod
	def _missing_(cls, value: object) -> "Verdict":
		# MEMORY_LIMIT_EXCEEDED, SKIPPED, TESTING, missing verdicts...
		return cls.OTHER


@dataclass(frozen=True)
class ProblemId:
	contest_id: Optional[int]
	index: str

	def __str__(self) -> str:
		contest = "" if self.contest_id is None else str(self.contest_id)
		return f"{contest}{self.index}"


@dataclass(frozen=True)
class SubmissionRecord:
	problem_id: ProblemId
	verdict: Verdict
	tags: Tuple[str, ...] = ()
	rating: Optional[int] = None
	language: str = ""
	submitted_at: int = 0


@dataclass(frozen=True)
class Profile:
	rating: Optional[int] = None
	rank: Optional[str] = None
	max_rating: Optional[int] = None
	organization: Optional[str] = None

	@classmethod
	def from_api(cls, data: Dict[str, Any]) -> "Profile":
		"""Build from a `user.info` result object; unrated users carry no rating keys."""
		return cls(
			rating=data.get("rating"),
			rank=data.get("rank"),
			max_rating=data.get("maxRating"),
			organization=data.get("organization") or None,
		)

	def as_dict(self) -> Dict[str, Any]:
		return {
			"rating": self.rating,
			"rank": self.rank,
			"max_rating": self.max_rating,
			"organization": self.organization,
		}


@dataclass(frozen=True)
class ProblemAttemptState:
	solved: bool = False
	attempt_count: int = 0
	tags: Tuple[str, ...] = ()
	rating: Optional[int] = None
	last_attempt_at: int = 0


def _empty_mapping() -> Mapping:
	return MappingProxyType({})


@dataclass(frozen=True)
class Analysis:
	"""Read-only result of `analyze`; mappings are proxies and ranked views are tuples."""

	total_problems_solved: int = 0
	total_submissions: int = 0
	total_accepted: int = 0
	total_attempts: int = 0
	solved_by_tag: Mapping[str, int] = field(default_factory=_empty_mapping)
	solved_by_rating: Mapping[int, int] = field(default_factory=_empty_mapping)
	languages: Mapping[str, int] = field(default_factory=_empty_mapping)
	verdicts: Mapping[Verdict, int] = field(default_factory=_empty_mapping)
	top_tags: Tuple[Tuple[str, int], ...] = ()
	weak_tags: Tuple[str, ...] = ()
	rating_distribution: Tuple[Tuple[int, int], ...] = ()
	top_languages: Tuple[Tuple[str, int], ...] = ()
	max_attempts: int = 0
	highest_solved_rating: int = 0
	tag_accuracy: Mapping[str, float] = field(default_factory=_empty_mapping)
	problems: Mapping[ProblemId, ProblemAttemptState] = field(default_factory=_empty_mapping)

	def as_dict(self) -> Dict[str, Any]:
		"""JSON-ready view; problem ids and verdicts become strings."""
		return {
			"total_problems_solved": self.total_problems_solved,
			"total_submissions": self.total_submissions,
			"total_accepted": self.total_accepted,
			"total_attempts": self.total_attempts,
			"solved_by_tag": dict(self.solved_by_tag),
			"solved_by_rating": {str(rating): count for rating, count in self.solved_by_rating.items()},
			"languages": dict(self.languages),
			"verdicts": {verdict.value: count for verdict, count in self.verdicts.items()},
			"top_tags": [[tag, count] for tag, count in self.top_tags],
			"weak_tags": list(self.weak_tags),
			"rating_distribution": [[rating, count] for rating, count in self.rating_distribution],
			"top_languages": [[language, count] for language, count in self.top_languages],
			"max_attempts": self.max_attempts,
			"highest_solved_rating": self.highest_solved_rating,
			"tag_accuracy": {tag: round(value, 4) for tag, value in self.tag_accuracy.items()},
		}


class _ProblemTally:
	__slots__ = ("solved", "attempt_count", "tags", "rating", "last_attempt_at")

	def __init__(self, tags: Tuple[str, ...], rating: Optional[int], submitted_at: int):
		self.solved = False
		self.attempt_count = 0
		self.tags = tags
		self.rating = rating
		self.last_attempt_at = submitted_at

	def freeze(self) -> ProblemAttemptState:
		return ProblemAttemptState(
			solved=self.solved,
			attempt_count=self.attempt_count,
			tags=self.tags,
			rating=self.rating,
			last_attempt_at=self.last_attempt_at,
		)


def _by_count_desc(item: Tuple[str, int]) -> Tuple[int, str]:
	return (-item[1], item[0])


def _by_count_asc(item: Tuple[str, int]) -> Tuple[int, str]:
	return (item[1], item[0])


def analyze(submissions: Iterable[SubmissionRecord]) -> Analysis:
	tallies: Dict[ProblemId, _ProblemTally] = {}
	languages: Dict[str, int] = {}
	verdicts: Dict[Verdict, int] = {}
	total_submissions = 0
	total_accepted = 0

	for submission in submissions:
		total_submissions += 1
		languages[submission.language] = languages.get(submission.language, 0) + 1
		verdicts[submission.verdict] = verdicts.get(submission.verdict, 0) + 1

		tally = tallies.get(submission.problem_id)
		if tally is None:
			tally = _ProblemTally(tuple(submission.tags), submission.rating, submission.submitted_at)
			tallies[submission.problem_id] = tally
		tally.attempt_count += 1
		tally.last_attempt_at = max(tally.last_attempt_at, submission.submitted_at)
		if submission.verdict is Verdict.ACCEPTED:
			tally.solved = True
			total_accepted += 1

	problems = {problem_id: tally.freeze() for problem_id, tally in tallies.items()}

	# Solved buckets are derived from per-problem state so that a problem counts
	# once no matter how many submissions it took or in which order they came.
	solved_by_tag: Dict[str, int] = {}
	solved_by_rating: Dict[int, int] = {}
	accuracies: Dict[str, List[float]] = {}
	total_problems_solved = 0
	max_attempts = 0
	for state in problems.values():
		max_attempts = max(max_attempts, state.attempt_count)
		if not state.solved:
			continue
		total_problems_solved += 1
		for tag in set(state.tags):
			solved_by_tag[tag] = solved_by_tag.get(tag, 0) + 1
			accuracies.setdefault(tag, []).append(1 / state.attempt_count)
		if state.rating:
			solved_by_rating[state.rating] = solved_by_rating.get(state.rating, 0) + 1

	# exact summation keeps the mean independent of problem order
	tag_accuracy = {tag: math.fsum(values) / len(values) for tag, values in accuracies.items()}
	rating_distribution = tuple(sorted(solved_by_rating.items()))

	return Analysis(
		total_problems_solved=total_problems_solved,
		total_submissions=total_submissions,
		total_accepted=total_accepted,
		total_attempts=total_submissions,
		solved_by_tag=MappingProxyType(solved_by_tag),
		solved_by_rating=MappingProxyType(solved_by_rating),
		languages=MappingProxyType(languages),
		verdicts=MappingProxyType(verdicts),
		top_tags=tuple(sorted(solved_by_tag.items(), key=_by_count_desc)[:TOP_TAGS_LIMIT]),
		weak_tags=tuple(tag for tag, _ in sorted(solved_by_tag.items(), key=_by_count_asc)[:WEAK_TAGS_LIMIT]),
		rating_distribution=rating_distribution,
		top_languages=tuple(sorted(languages.items(), key=_by_count_desc)[:TOP_LANGUAGES_LIMIT]),
		max_attempts=max_attempts,
		highest_solved_rating=rating_distribution[-1][0] if rating_distribution else 0,
		tag_accuracy=MappingProxyType(tag_accuracy),
		problems=MappingProxyType(problems),
	)
