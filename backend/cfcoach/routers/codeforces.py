from __future__ import annotations
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from ..analysis import analyze
from ..codeforces_client import CodeforcesClient, CodeforcesError, CodeforcesNotFoundError, get_codeforces_client
from .auth import User, get_current_user


router = APIRouter(prefix="/codeforces", tags=["codeforces"])

logger = logging.getLogger(__name__)


def _problem_out(problem: Dict[str, Any]) -> Dict[str, Any]:
	contest_id = problem.get("contestId")
	index = problem.get("index")
	return {
		"id": f"{contest_id}{index}",
		"name": problem.get("name"),
		"rating": problem.get("rating"),
		"tags": problem.get("tags") or [],
		"url": f"https://codeforces.com/problemset/problem/{contest_id}/{index}",
	}


async def _fetch(cf: CodeforcesClient, handle: str):
	try:
		profile = await cf.user_info(handle)
		submissions = await cf.user_submissions(handle)
	except CodeforcesNotFoundError as e:
		raise HTTPException(status_code=404, detail=str(e))
	except CodeforcesError as e:
		logger.warning("Codeforces fetch failed for %s: %s", handle, e)
		raise HTTPException(status_code=502, detail=str(e))
	return profile, analyze(submissions)


@router.get("/{handle}")
async def handle_analysis(
	handle: str,
	user: User = Depends(get_current_user),
	cf: CodeforcesClient = Depends(get_codeforces_client),
):
	profile, analysis = await _fetch(cf, handle)
	return {"handle": handle, "profile": profile.as_dict(), "analysis": analysis.as_dict()}


@router.get("/{handle}/recommendations")
async def recommendations(
	handle: str,
	user: User = Depends(get_current_user),
	cf: CodeforcesClient = Depends(get_codeforces_client),
):
	profile, analysis = await _fetch(cf, handle)
	solved = [problem_id for problem_id, state in analysis.problems.items() if state.solved]
	try:
		problems: List[Dict[str, Any]] = await cf.recommended_problems(analysis.weak_tags, profile.rating, exclude=set(solved))
	except CodeforcesError as e:
		raise HTTPException(status_code=502, detail=str(e))
	return {
		"handle": handle,
		"weak_tags": analysis.weak_tags,
		"problems": [_problem_out(problem) for problem in problems],
	}
