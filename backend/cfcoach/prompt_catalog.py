from __future__ import annotations
from typing import Any, Dict, List, Optional

CODEFORCES_ANALYSIS = "codeforces_analysis"

SYSTEM_PROMPTS: Dict[str, str] = {
	"general_chat": "You are a helpful AI assistant. Respond conversationally and provide detailed, helpful responses.",
	"business_plan": "Analyze this business idea and provide a comprehensive business plan including market analysis, SWOT analysis, target audience, marketing strategy, and financial projections.",
	"code_review": "Review this code for best practices, identify bugs, security issues, suggest optimizations, and provide improved code examples.",
	"content_strategy": "Create a content strategy including topics, platforms, posting schedule, engagement tactics, and performance metrics.",
	"market_research": "Provide detailed market research including competitors, trends, opportunities, threats, and market size.",
	"learning_path": "Create a personalized learning path with resources, milestones, projects, and assessment methods.",
	"email_writing": "Write professional, clear, and effective emails for the given purpose and audience.",
	"creative_writing": "Help with creative writing including stories, poems, scripts, and brainstorming ideas.",
	"problem_solving": "Analyze problems systematically and provide step-by-step solutions with implementation guidance.",
	CODEFORCES_ANALYSIS: (
		"You are a competitive programming expert specializing in Codeforces analysis. "
		"Analyze the user's Codeforces data and provide specific, actionable recommendations including problem IDs, "
		"areas to focus on, and study plans. Structure your response with clear sections and be specific about problem recommendations."
	),
}

CATEGORIES: Dict[str, List[str]] = {
	"Business": ["business_plan", "market_research"],
	"Development": ["code_review", "learning_path", CODEFORCES_ANALYSIS],
	"Marketing": ["content_strategy", "email_writing"],
	"Creative": ["creative_writing"],
	"General": ["general_chat", "problem_solving"],
}

COLORS: Dict[str, str] = {
	"business_plan": "#4caf50",
	"code_review": "#f44336",
	"content_strategy": "#ff9800",
	"general_chat": "#2196f3",
	"market_research": "#8bc34a",
	"learning_path": "#00bcd4",
	"email_writing": "#3f51b5",
	"creative_writing": "#9c27b0",
	"problem_solving": "#607d8b",
	CODEFORCES_ANALYSIS: "#9c27b0",
}


def display_name(prompt_id: str) -> str:
	return " ".join(word.capitalize() for word in prompt_id.split("_"))


def category_of(prompt_id: str) -> str:
	for category, members in CATEGORIES.items():
		if prompt_id in members:
			return category
	return "General"


def describe(prompt_id: str, *, full: bool = False) -> Optional[Dict[str, Any]]:
	text = SYSTEM_PROMPTS.get(prompt_id)
	if text is None:
		return None
	entry: Dict[str, Any] = {
		"id": prompt_id,
		"name": display_name(prompt_id),
		"description": text if full else text[:150],
		"category": category_of(prompt_id),
	}
	if full:
		entry["color"] = COLORS.get(prompt_id, "#2196f3")
	return entry
