"""Template recommendations used when the chat-completions backend is unavailable."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from .analysis import Analysis, Profile
from .prompts import format_percentage


DEFAULT_RATING = 1200
MIN_PROBLEM_RATING = 800
RATING_BAND_HALF_WIDTH = 100


def target_rating_band(rating: Optional[int]) -> Tuple[int, int]:
	user_rating = rating or DEFAULT_RATING
	return (max(MIN_PROBLEM_RATING, user_rating - RATING_BAND_HALF_WIDTH), user_rating + RATING_BAND_HALF_WIDTH)


def synthesize_fallback(
	handle: str,
	profile: Profile,
	analysis: Analysis,
	generated_at: Optional[datetime] = None,
) -> str:
	user_rating = profile.rating or DEFAULT_RATING
	low, high = target_rating_band(profile.rating)
	weakest = analysis.weak_tags[0] if analysis.weak_tags else None

	lines: List[str] = [f"## Codeforces Analysis for {handle}", ""]

	lines += [
		"### Basic Statistics",
		f"- **Rating**: {profile.rating or 'Unrated'} ({profile.rank or 'Unranked'})",
		f"- **Max Rating**: {profile.max_rating or profile.rating or 'Unrated'}",
		f"- **Problems Solved**: {analysis.total_problems_solved}",
		f"- **Acceptance Rate**: {format_percentage(analysis.total_accepted, analysis.total_submissions)}",
		"",
	]

	if analysis.top_tags:
		lines.append("### Top Strengths")
		for position, (tag, count) in enumerate(analysis.top_tags[:3], start=1):
			lines.append(f"{position}. **{tag}**: {count} problems solved")
		lines.append("")

	if analysis.weak_tags:
		lines.append("### Areas for Improvement")
		for position, tag in enumerate(analysis.weak_tags[:3], start=1):
			lines.append(f"{position}. **{tag}**: Only {analysis.solved_by_tag.get(tag, 0)} problems solved")
		lines.append("")

	lines += [
		"### Recommended Next Steps",
		f"1. **Target Rating**: Practice problems rated {low}-{high}",
		f"2. **Weak Areas**: Focus on {weakest or 'dynamic programming'} problems",
		"3. **Contest Strategy**: Participate in Div 2 contests regularly",
		"4. **Learning Plan**: Solve 5-10 problems daily from different categories",
		"",
	]

	lines += [
		"### Specific Recommendations",
		f"- **Immediate Focus**: {weakest or 'Graph Theory'} problems",
		"- **Problem Count**: Aim for 50 more solves in your weak areas",
		f"- **Rating Goal**: Target {user_rating + RATING_BAND_HALF_WIDTH} within 2 months",
		"- **Resources**: Use Codeforces Edu section for tutorials",
		"",
	]

	lines += [
		"### Recommended Practice Problems",
		f'1. Search Codeforces for "{weakest or "dp"}" tagged problems at {low} rating',
		"2. Try recent Div 2 A/B problems to build speed",
		"3. Practice virtual contests to simulate real competition",
	]

	if generated_at is not None:
		lines += ["", f"*Template recommendations generated {generated_at:%Y-%m-%d %H:%M} UTC*"]

	return "\n".join(lines)
