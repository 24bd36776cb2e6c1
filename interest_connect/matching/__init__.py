"""People matching and group recommendation scoring."""

from interest_connect.matching.models import (
	GroupProfile,
	GroupRecommendation,
	MatchResult,
	Profile,
	UserType,
)
from interest_connect.matching.scorer import (
	calculate_match_score,
	find_common_elements,
	find_matches,
	recommend_groups,
)

__all__ = [
	"GroupProfile",
	"GroupRecommendation",
	"MatchResult",
	"Profile",
	"UserType",
	"calculate_match_score",
	"find_common_elements",
	"find_matches",
	"recommend_groups",
]
