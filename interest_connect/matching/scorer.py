"""Interest-overlap match scoring for people and group recommendations.

Every function here is pure: inputs are never mutated and each call is
computed from scratch, so results are safe to share across request tasks.
"""

from __future__ import annotations

from typing import Any, Collection, Iterable, List, Optional, Sequence

from interest_connect.matching.models import (
	GroupMatchable,
	GroupRecommendation,
	Matchable,
	MatchResult,
)

INTEREST_POINTS = 10
INTEREST_CAP = 40
SKILL_POINTS = 10
SKILL_CAP = 30
SAME_TYPE_POINTS = 15
AGE_WINDOW = 10
SAME_LOCATION_POINTS = 5
MAX_SCORE = 100

GROUP_INTEREST_POINTS = 20

DEFAULT_MATCH_LIMIT = 10
DEFAULT_GROUP_LIMIT = 5


def _id_set(values: Optional[Collection[Any]]) -> set[str]:
	return {str(value) for value in values or ()}


def _type_value(value: Any) -> Any:
	return getattr(value, "value", value)


def find_common_elements(first: Optional[Sequence[str]], second: Optional[Sequence[str]]) -> List[str]:
	"""Return items of ``first`` that appear in ``second`` ignoring case.

	Order follows ``first`` and duplicates in ``first`` are kept.
	"""
	lowered = {item.lower() for item in second or ()}
	return [item for item in first or () if item.lower() in lowered]


def calculate_match_score(user_a: Matchable, user_b: Matchable) -> int:
	"""Score the compatibility of two users on a 0-100 scale."""
	if str(user_a.id) == str(user_b.id):
		return 0
	if str(user_b.id) in _id_set(user_a.blocked_users) or str(user_a.id) in _id_set(user_b.blocked_users):
		return 0

	score = 0

	common_interests = find_common_elements(user_a.interests, user_b.interests)
	score += min(len(common_interests) * INTEREST_POINTS, INTEREST_CAP)

	common_skills = find_common_elements(user_a.skills, user_b.skills)
	score += min(len(common_skills) * SKILL_POINTS, SKILL_CAP)

	if _type_value(user_a.user_type) == _type_value(user_b.user_type):
		score += SAME_TYPE_POINTS

	if user_a.age is not None and user_b.age is not None:
		score += max(AGE_WINDOW - abs(user_a.age - user_b.age), 0)

	if user_a.location and user_b.location and user_a.location.lower() == user_b.location.lower():
		score += SAME_LOCATION_POINTS

	return min(score, MAX_SCORE)


def find_matches(
	current: Matchable,
	candidates: Iterable[Matchable],
	limit: int = DEFAULT_MATCH_LIMIT,
) -> List[MatchResult]:
	"""Rank ``candidates`` against ``current``, best first.

	Candidates scoring zero are dropped. Equal scores keep their input order.
	"""
	matches: List[MatchResult] = []
	for candidate in candidates:
		score = calculate_match_score(current, candidate)
		if score <= 0:
			continue
		matches.append(
			MatchResult(
				user=candidate,
				match_score=score,
				common_interests=tuple(find_common_elements(current.interests, candidate.interests)),
				common_skills=tuple(find_common_elements(current.skills, candidate.skills)),
			)
		)
	matches.sort(key=lambda match: match.match_score, reverse=True)
	return matches[:limit]


def recommend_groups(
	user: Matchable,
	groups: Iterable[GroupMatchable],
	limit: int = DEFAULT_GROUP_LIMIT,
) -> List[GroupRecommendation]:
	"""Rank groups the user has not joined by shared interests."""
	user_id = str(user.id)
	recommendations: List[GroupRecommendation] = []
	for group in groups:
		if user_id in _id_set(group.members):
			continue
		matched = find_common_elements(user.interests, group.interests)
		score = len(matched) * GROUP_INTEREST_POINTS
		if score <= 0:
			continue
		recommendations.append(
			GroupRecommendation(group=group, relevance_score=score, matched_interests=tuple(matched))
		)
	recommendations.sort(key=lambda rec: rec.relevance_score, reverse=True)
	return recommendations[:limit]
