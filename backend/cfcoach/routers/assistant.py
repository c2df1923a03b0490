from __future__ import annotations
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import prompt_catalog
from ..analysis import analyze
from ..codeforces_client import CodeforcesClient, CodeforcesError, CodeforcesNotFoundError, get_codeforces_client
from ..db import get_db
from ..fallback import synthesize_fallback
from ..llm_client import ChatClient, LLMError, LLMNotConfiguredError, get_chat_client
from ..models import AuthUser, Generation
from ..prompts import synthesize_prompt
from .auth import User, get_current_user


router = APIRouter(prefix="/assistant", tags=["assistant"])

logger = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
	prompt_type: str
	user_input: str
	context: str = ""


class CodeforcesRequest(BaseModel):
	handle: str


def _now_iso() -> str:
	return datetime.now(timezone.utc).isoformat()


def _reserve_request(db: Session, user: User) -> Optional[AuthUser]:
	# Enforce per-user request limits; the demo user has no row and no limit
	row = db.query(AuthUser).filter(AuthUser.username == user.username).first()
	if row is not None and row.requests_used >= row.requests_limit:
		raise HTTPException(status_code=429, detail="request limit reached")
	return row


def _save_generation(
	db: Session,
	user: User,
	account: Optional[AuthUser],
	*,
	prompt_type: str,
	user_input: str,
	ai_response: str,
	tokens_used: int,
	mode: str,
	metadata: Optional[Dict[str, Any]] = None,
) -> Optional[str]:
	"""Persist a generation and update usage. History is best-effort: failures never fail the request."""
	try:
		row = Generation(
			username=user.username,
			prompt_type=prompt_type,
			user_input=user_input,
			ai_response=ai_response,
			tokens_used=tokens_used,
			mode=mode,
			metadata_json=json.dumps(metadata) if metadata else None,
		)
		db.add(row)
		if account is not None:
			account.record_usage(tokens_used)
			db.add(account)
		db.commit()
		logger.info("Saved %s generation for %s (%s mode)", prompt_type, user.username, mode)
		return row.id
	except Exception:
		db.rollback()
		logger.exception("Failed to save generation for %s", user.username)
		return None


def _generation_out(row: Generation) -> Dict[str, Any]:
	return {
		"id": row.id,
		"prompt_type": row.prompt_type,
		"prompt_name": row.prompt_name,
		"user_input": row.user_input,
		"ai_response": row.ai_response,
		"tokens_used": row.tokens_used,
		"mode": row.mode,
		"metadata": row.metadata_dict,
		"created_at": row.created_at.isoformat() if row.created_at else None,
	}


@router.get("/test")
def test():
	return {
		"success": True,
		"message": "Assistant routes are working",
		"available_prompts": list(prompt_catalog.SYSTEM_PROMPTS),
		"endpoints": {
			"generate": "POST /assistant/generate",
			"codeforces": "POST /assistant/codeforces",
			"prompts": "GET /assistant/prompts",
			"prompts_by_id": "GET /assistant/prompts/{prompt_id}",
			"history": "GET /assistant/history",
			"history_by_id": "GET /assistant/history/{generation_id}",
			"stats": "GET /assistant/stats",
		},
		"timestamp": _now_iso(),
	}


@router.get("/prompts")
def list_prompts(user: User = Depends(get_current_user)):
	prompts = [prompt_catalog.describe(prompt_id) for prompt_id in prompt_catalog.SYSTEM_PROMPTS]
	return {"success": True, "prompts": prompts, "user": user.username}


@router.get("/prompts/{prompt_id}")
def get_prompt(prompt_id: str, user: User = Depends(get_current_user)):
	entry = prompt_catalog.describe(prompt_id, full=True)
	if entry is None:
		raise HTTPException(status_code=404, detail="Prompt not found")
	return {"success": True, "prompt": entry}


@router.post("/generate")
async def generate(
	req: GenerateRequest,
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
	client: ChatClient = Depends(get_chat_client),
):
	user_input = (req.user_input or "").strip()
	if not req.prompt_type or not user_input:
		raise HTTPException(status_code=400, detail="prompt_type and user_input are required")
	system_prompt = prompt_catalog.SYSTEM_PROMPTS.get(req.prompt_type)
	if system_prompt is None:
		available = ", ".join(prompt_catalog.SYSTEM_PROMPTS)
		raise HTTPException(status_code=400, detail=f"Invalid prompt type. Available types: {available}")
	account = _reserve_request(db, user)

	full_prompt = f"{req.context}\n{system_prompt}\n\nUser Input: {user_input}" if req.context else f"{system_prompt}\n\nUser Input: {user_input}"
	try:
		result = await client.complete(full_prompt)
	except LLMNotConfiguredError as e:
		raise HTTPException(status_code=503, detail=str(e))
	except LLMError as e:
		logger.warning("Generate failed for %s: %s", user.username, e)
		raise HTTPException(status_code=502, detail="Failed to generate response")

	generation_id = _save_generation(
		db,
		user,
		account,
		prompt_type=req.prompt_type,
		user_input=user_input,
		ai_response=result.text,
		tokens_used=result.tokens_used,
		mode="ai",
	)
	return {
		"success": True,
		"data": result.text,
		"prompt_type": req.prompt_type,
		"mode": "ai",
		"provider": result.provider,
		"tokens": result.tokens_used,
		"generation_id": generation_id,
		"timestamp": _now_iso(),
	}


@router.post("/codeforces")
async def codeforces_analysis(
	req: CodeforcesRequest,
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
	client: ChatClient = Depends(get_chat_client),
	cf: CodeforcesClient = Depends(get_codeforces_client),
):
	handle = (req.handle or "").strip()
	if not handle:
		raise HTTPException(status_code=400, detail="handle is required")
	account = _reserve_request(db, user)

	try:
		profile = await cf.user_info(handle)
		submissions = await cf.user_submissions(handle)
	except CodeforcesNotFoundError as e:
		raise HTTPException(status_code=404, detail=str(e))
	except CodeforcesError as e:
		logger.warning("Codeforces fetch failed for %s: %s", handle, e)
		raise HTTPException(status_code=502, detail=str(e))

	analysis = analyze(submissions)
	prompt = synthesize_prompt(handle, profile, analysis)
	try:
		result = await client.complete(prompt, system_prompt=prompt_catalog.SYSTEM_PROMPTS[prompt_catalog.CODEFORCES_ANALYSIS])
		text, tokens, mode = result.text, result.tokens_used, "ai"
	except LLMError as e:
		logger.info("Using template recommendations for %s: %s", handle, e)
		text = synthesize_fallback(handle, profile, analysis, generated_at=datetime.now(timezone.utc))
		tokens, mode = 0, "fallback"

	generation_id = _save_generation(
		db,
		user,
		account,
		prompt_type=prompt_catalog.CODEFORCES_ANALYSIS,
		user_input=f"Codeforces analysis for {handle}",
		ai_response=text,
		tokens_used=tokens,
		mode=mode,
		metadata={
			"handle": handle,
			"rating": profile.rating,
			"problems_solved": analysis.total_problems_solved,
		},
	)
	return {
		"success": True,
		"data": text,
		"prompt_type": prompt_catalog.CODEFORCES_ANALYSIS,
		"mode": mode,
		"tokens": tokens,
		"generation_id": generation_id,
		"profile": profile.as_dict(),
		"analysis": analysis.as_dict(),
		"timestamp": _now_iso(),
	}


@router.get("/history")
def history(
	limit: int = Query(default=20, ge=1, le=100),
	skip: int = Query(default=0, ge=0),
	prompt_type: Optional[str] = None,
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
):
	query = db.query(Generation).filter(Generation.username == user.username)
	if prompt_type and prompt_type != "all":
		query = query.filter(Generation.prompt_type == prompt_type)
	total = query.count()
	rows = query.order_by(Generation.created_at.desc()).offset(skip).limit(limit).all()
	return {
		"success": True,
		"generations": [_generation_out(row) for row in rows],
		"total": total,
		"limit": limit,
		"skip": skip,
		"has_more": total > skip + limit,
	}


@router.get("/history/{generation_id}")
def history_item(generation_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = (
		db.query(Generation)
		.filter(Generation.id == generation_id, Generation.username == user.username)
		.first()
	)
	if row is None:
		raise HTTPException(status_code=404, detail="Generation not found or access denied")
	return {"success": True, "generation": _generation_out(row)}


@router.get("/stats")
def stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	base = db.query(Generation).filter(Generation.username == user.username)
	total_generations = base.count()
	total_tokens = (
		db.query(func.coalesce(func.sum(Generation.tokens_used), 0))
		.filter(Generation.username == user.username)
		.scalar()
	)
	by_prompt_type = (
		db.query(Generation.prompt_type, func.count(Generation.id))
		.filter(Generation.username == user.username)
		.group_by(Generation.prompt_type)
		.order_by(func.count(Generation.id).desc())
		.all()
	)
	recent = base.order_by(Generation.created_at.desc()).limit(5).all()
	return {
		"success": True,
		"stats": {
			"total_generations": total_generations,
			"total_tokens": int(total_tokens or 0),
			"by_prompt_type": {prompt_type: count for prompt_type, count in by_prompt_type},
			"recent_activity": [
				{"prompt_type": row.prompt_type, "date": row.created_at.isoformat(), "mode": row.mode}
				for row in recent
			],
		},
	}
