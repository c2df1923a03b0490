from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List

from .analysis import Analysis, Profile


PERSISTENCE_ATTEMPTS_THRESHOLD = 5

RECOMMENDATION_REQUESTS = [
	"Specific competitive programming areas to focus on",
	"Recommended problem ratings to target (current level and next level)",
	"Study plan suggestions",
	"Key problem types to practice",
	"Tips to improve contest performance",
	"Recommended Codeforces problem IDs to solve next (provide 5-10 specific problem IDs with ratings)",
]


def _quantize_half_up(value: float, exponent: str) -> Decimal:
	# exact binary value, .5 rounds away from zero
	return Decimal(value).quantize(Decimal(exponent), rounding=ROUND_HALF_UP)


def round_half_up(value: float) -> int:
	return int(_quantize_half_up(value, "1"))


def format_percentage(numerator: float, denominator: float) -> str:
	"""Percentage with one decimal, or "0%" when there is nothing to divide by."""
	if not denominator:
		return "0%"
	return f"{_quantize_half_up(numerator / denominator * 100, '0.1')}%"


def synthesize_prompt(handle: str, profile: Profile, analysis: Analysis) -> str:
	"""Describe a handle's Codeforces record as a request for coaching advice.

	The output is deterministic for a given input and degrades to explicit
	"No ... data available" lines when the analysis is empty.
	"""
	user_rating = profile.rating or 0
	user_rank = profile.rank or "unrated"
	lines: List[str] = [f"I have analyzed the Codeforces profile of {handle}. Here's a detailed analysis:", ""]

	lines += [
		"User Information:",
		f"- Handle: {handle}",
		f"- Current Rating: {user_rating} ({user_rank})",
		f"- Max Rating: {profile.max_rating or user_rating}",
		f"- Organization: {profile.organization or 'Not specified'}",
		"",
	]

	lines += [
		"Performance Metrics:",
		f"- Total Problems Solved: {analysis.total_problems_solved}",
		f"- Total Submissions: {analysis.total_submissions}",
		f"- Acceptance Rate: {format_percentage(analysis.total_accepted, analysis.total_submissions)}",
		f"- Highest Solved Rating: {analysis.highest_solved_rating}",
		"",
	]

	lines.append("Strengths (Top Problem Tags):")
	if analysis.top_tags:
		for position, (tag, count) in enumerate(analysis.top_tags[:5], start=1):
			lines.append(f"{position}. {tag}: {count} problems solved")
	else:
		lines.append("No tag data available")

	lines += ["", "Areas for Improvement (Weakest Tags):"]
	if analysis.weak_tags:
		for position, tag in enumerate(analysis.weak_tags, start=1):
			lines.append(f"{position}. {tag}: Only {analysis.solved_by_tag.get(tag, 0)} problems solved")
	else:
		lines.append("No weakness data available")

	lines += ["", "Rating Distribution Analysis:"]
	if analysis.rating_distribution:
		ratings = [rating for rating, _ in analysis.rating_distribution]
		average = sum(ratings) / len(ratings)
		gap = max(0.0, user_rating + 100 - average)
		lines += [
			f"- Average solved problem rating: {round_half_up(average)}",
			f"- Current rating capability: {user_rating}",
			f"- Gap to next level: {round_half_up(gap)} rating points",
		]
	else:
		lines.append("No rating distribution data available")

	lines += ["", "Programming Language Usage:"]
	if analysis.top_languages:
		for position, (language, count) in enumerate(analysis.top_languages, start=1):
			lines.append(f"{position}. {language}: {format_percentage(count, analysis.total_submissions)} of submissions")
	else:
		lines.append("No language data available")

	lines += ["", "Problem-Solving Patterns:"]
	lines.append(f"- Maximum attempts on a single problem: {analysis.max_attempts or 'N/A'}")
	if analysis.max_attempts > PERSISTENCE_ATTEMPTS_THRESHOLD:
		lines.append("- Pattern: Tendency to persist on difficult problems (good for learning)")
	else:
		lines.append("- Pattern: Efficient problem-solver, moves on quickly")

	lines += ["", "Based on this analysis, please provide:"]
	for position, request in enumerate(RECOMMENDATION_REQUESTS, start=1):
		lines.append(f"{position}. {request}")
	lines += ["", "Please structure your response with clear sections and be specific about problem recommendations."]

	return "\n".join(lines)
