from __future__ import annotations
import logging
import httpx
from typing import Any, Collection, Dict, List, Optional, Sequence
from .analysis import ProblemId, Profile, SubmissionRecord, Verdict
from .settings import settings

logger = logging.getLogger(__name__)

RECOMMENDATION_RATING_SPREAD = 200
RECOMMENDATION_LIMIT = 10


class CodeforcesError(RuntimeError):
	pass


class CodeforcesNotFoundError(CodeforcesError):
	pass


class MalformedSubmissionError(ValueError):
	pass


def parse_submission(raw: Dict[str, Any]) -> SubmissionRecord:
	"""Validate one `user.status` entry; the analyzer only ever sees well-formed records."""
	if not isinstance(raw, dict):
		raise MalformedSubmissionError(f"submission entry is not an object: {raw!r}")
	problem = raw.get("problem")
	if not isinstance(problem, dict) or not problem.get("index"):
		raise MalformedSubmissionError(f"submission {raw.get('id')} has no problem identifier")
	rating = problem.get("rating")
	if rating is not None and (not isinstance(rating, int) or rating <= 0):
		raise MalformedSubmissionError(f"submission {raw.get('id')} has invalid rating {rating!r}")
	tags = problem.get("tags") or ()
	if not isinstance(tags, (list, tuple)) or not all(isinstance(tag, str) for tag in tags):
		raise MalformedSubmissionError(f"submission {raw.get('id')} has invalid tags {tags!r}")
	try:
		contest_id = _optional_int(problem.get("contestId"))
		submitted_at = int(raw.get("creationTimeSeconds") or 0)
	except (TypeError, ValueError) as err:
		raise MalformedSubmissionError(f"submission {raw.get('id')} has a non-numeric field: {err}") from err
	return SubmissionRecord(
		problem_id=ProblemId(contest_id=contest_id, index=str(problem["index"])),
		verdict=Verdict(raw.get("verdict")),
		tags=tuple(tags),
		rating=rating,
		language=str(raw.get("programmingLanguage") or "Unknown"),
		submitted_at=submitted_at,
	)


def _optional_int(value: Any) -> Optional[int]:
	return int(value) if value is not None else None


def _problem_key(problem: Dict[str, Any]) -> Optional[ProblemId]:
	if not problem.get("index"):
		return None
	try:
		contest_id = _optional_int(problem.get("contestId"))
	except (TypeError, ValueError):
		return None
	return ProblemId(contest_id=contest_id, index=str(problem["index"]))


def select_problems(
	problems: Sequence[Dict[str, Any]],
	low: int,
	high: int,
	exclude: Collection[ProblemId] = (),
	limit: int = RECOMMENDATION_LIMIT,
) -> List[Dict[str, Any]]:
	picked = []
	for problem in problems:
		rating = problem.get("rating")
		if not rating or not (low <= rating <= high):
			continue
		key = _problem_key(problem)
		if key is None or key in exclude:
			continue
		picked.append(problem)
	picked.sort(key=lambda p: p["rating"])
	return picked[:limit]


class CodeforcesClient:
	def __init__(self, *, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
		self.base_url = (base_url or settings.codeforces_api_url).rstrip("/")
		self._client = httpx.AsyncClient(timeout=settings.codeforces_timeout_seconds, transport=transport)

	async def _call(self, method: str, params: Dict[str, Any]) -> Any:
		try:
			r = await self._client.get(f"{self.base_url}/{method}", params=params)
		except httpx.RequestError as net_err:
			raise CodeforcesError(f"Codeforces {method} request failed: {net_err}") from net_err
		# The API reports failures (unknown handle...) as 400 with a JSON comment
		try:
			data = r.json()
		except ValueError:
			raise CodeforcesError(f"Codeforces {method} returned HTTP {r.status_code}")
		if not isinstance(data, dict):
			raise CodeforcesError(f"Codeforces {method} returned an unexpected payload (HTTP {r.status_code})")
		if data.get("status") != "OK":
			comment = str(data.get("comment") or f"HTTP {r.status_code}")
			if "not found" in comment.lower():
				raise CodeforcesNotFoundError(comment)
			raise CodeforcesError(f"Codeforces {method} failed: {comment}")
		return data.get("result")

	async def user_info(self, handle: str) -> Profile:
		result = await self._call("user.info", {"handles": handle})
		if not result:
			raise CodeforcesNotFoundError(f"handle {handle} not found")
		if not isinstance(result, list) or not isinstance(result[0], dict):
			raise CodeforcesError("Codeforces user.info returned an unexpected result")
		return Profile.from_api(result[0])

	async def user_submissions(self, handle: str, *, count: Optional[int] = None) -> List[SubmissionRecord]:
		result = await self._call(
			"user.status",
			{"handle": handle, "from": 1, "count": count or settings.codeforces_submission_count},
		)
		if result is not None and not isinstance(result, list):
			raise CodeforcesError("Codeforces user.status returned an unexpected result")
		records: List[SubmissionRecord] = []
		rejected = 0
		for raw in result or []:
			try:
				records.append(parse_submission(raw))
			except MalformedSubmissionError as err:
				rejected += 1
				logger.debug("Skipping submission for %s: %s", handle, err)
		if rejected:
			logger.warning("Rejected %d malformed submissions for %s", rejected, handle)
		return records

	async def problems(self, tags: Sequence[str] = ()) -> List[Dict[str, Any]]:
		params = {"tags": ";".join(tags)} if tags else {}
		result = await self._call("problemset.problems", params)
		if result is not None and not isinstance(result, dict):
			raise CodeforcesError("Codeforces problemset.problems returned an unexpected result")
		return [problem for problem in (result or {}).get("problems") or [] if isinstance(problem, dict)]

	async def recommended_problems(
		self,
		weak_tags: Sequence[str],
		rating: Optional[int],
		*,
		exclude: Collection[ProblemId] = (),
		limit: int = RECOMMENDATION_LIMIT,
	) -> List[Dict[str, Any]]:
		target = rating or 1200
		low, high = max(800, target - RECOMMENDATION_RATING_SPREAD), target + RECOMMENDATION_RATING_SPREAD
		if weak_tags:
			try:
				picked = select_problems(await self.problems(weak_tags[:3]), low, high, exclude, limit)
				if picked:
					return picked
			except CodeforcesError as err:
				logger.info("Tagged problemset query failed, using the full problemset: %s", err)
		return select_problems(await self.problems(), low, high, exclude, limit)

	async def aclose(self) -> None:
		await self._client.aclose()


async def get_codeforces_client():
	client = CodeforcesClient()
	try:
		yield client
	finally:
		await client.aclose()
