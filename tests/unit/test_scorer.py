import random

import pytest

from interest_connect.matching import (
    GroupProfile,
    Profile,
    UserType,
    calculate_match_score,
    find_common_elements,
    find_matches,
    recommend_groups,
)

INTEREST_POOL = ["music", "Art", "chess", "Hiking", "python", "Cooking", "Film", "yoga", "Travel", "games"]
SKILL_POOL = ["sql", "Design", "writing", "Guitar", "spanish", "Photography", "react"]
LOCATIONS = ["Berlin", "berlin", "Paris", "Lisbon", None]


def _random_profile(rng: random.Random, profile_id: str) -> Profile:
    return Profile(
        id=profile_id,
        interests=tuple(rng.sample(INTEREST_POOL, rng.randint(0, 7))),
        skills=tuple(rng.sample(SKILL_POOL, rng.randint(0, 5))),
        user_type=rng.choice(list(UserType)),
        age=rng.choice([None, *range(16, 60)]),
        location=rng.choice(LOCATIONS),
    )


def test_find_common_elements_is_case_insensitive_and_keeps_first_order():
    assert find_common_elements(["Music", "Art", "Chess"], ["chess", "music"]) == ["Music", "Chess"]


def test_find_common_elements_keeps_duplicates_and_handles_none():
    assert find_common_elements(["art", "Art"], ["ART"]) == ["art", "Art"]
    assert find_common_elements(None, ["art"]) == []
    assert find_common_elements(["art"], None) == []


def test_reference_example_scores_25():
    a = Profile(id="a", interests=("Music", "Art", "Chess"), user_type=UserType.STUDENT)
    b = Profile(id="b", interests=("music", "Hiking"), user_type=UserType.STUDENT)
    assert calculate_match_score(a, b) == 25


def test_interest_term_is_capped_at_40():
    shared = ("a", "b", "c", "d", "e")
    a = Profile(id="a", interests=shared, user_type=UserType.STUDENT)
    b = Profile(id="b", interests=shared, user_type=UserType.PROFESSIONAL)
    assert calculate_match_score(a, b) == 40


def test_skill_term_is_capped_at_30():
    skills = ("sql", "go", "rust", "c")
    a = Profile(id="a", skills=skills, user_type=UserType.STUDENT)
    b = Profile(id="b", skills=tuple(s.upper() for s in skills), user_type=UserType.HOBBYIST)
    assert calculate_match_score(a, b) == 30


def test_age_and_location_terms():
    a = Profile(id="a", user_type=UserType.STUDENT, age=25, location="Berlin")
    b = Profile(id="b", user_type=UserType.HOBBYIST, age=22, location="berlin")
    assert calculate_match_score(a, b) == 7 + 5

    far = Profile(id="c", user_type=UserType.HOBBYIST, age=40)
    assert calculate_match_score(a, far) == 0


def test_missing_age_contributes_nothing():
    a = Profile(id="a", user_type=UserType.STUDENT, age=30)
    b = Profile(id="b", user_type=UserType.STUDENT)
    assert calculate_match_score(a, b) == 15


def test_total_is_capped_at_100():
    interests = ("a", "b", "c", "d")
    skills = ("x", "y", "z")
    a = Profile(id="a", interests=interests, skills=skills, age=30, location="Oslo")
    b = Profile(id="b", interests=interests, skills=skills, age=30, location="oslo")
    assert calculate_match_score(a, b) == 100


def test_self_and_blocked_pairs_score_zero():
    a = Profile(id="a", interests=("music",), blocked_users=frozenset({"b"}))
    b = Profile(id="b", interests=("music",))
    same = Profile(id="a", interests=("music",))
    assert calculate_match_score(a, same) == 0
    assert calculate_match_score(a, b) == 0
    assert calculate_match_score(b, a) == 0


def test_find_matches_limit_and_stable_ties():
    current = Profile(id="me", interests=("a", "b", "c", "d"), user_type=UserType.PROFESSIONAL)
    candidates = [
        Profile(id="c0", interests=("a",), user_type=UserType.HOBBYIST),  # 10
        Profile(id="c1", interests=("a", "b", "c", "d"), user_type=UserType.HOBBYIST),  # 40
        Profile(id="c2", user_type=UserType.HOBBYIST),  # 0
        Profile(id="c3", interests=("a",), user_type=UserType.PROFESSIONAL),  # 25
        Profile(id="c4", interests=("d", "c", "b", "a"), user_type=UserType.STUDENT),  # 40
    ]
    scores = [calculate_match_score(current, c) for c in candidates]
    assert scores == [10, 40, 0, 25, 40]

    results = find_matches(current, candidates, limit=2)
    assert [r.user.id for r in results] == ["c1", "c4"]
    assert all(r.match_score == 40 for r in results)

    everything = find_matches(current, candidates)
    assert [r.user.id for r in everything] == ["c1", "c4", "c3", "c0"]


def test_find_matches_reports_common_terms_in_current_order():
    current = Profile(id="me", interests=("Chess", "Music"), skills=("SQL",))
    other = Profile(id="o", interests=("music", "chess"), skills=("sql", "go"))
    (result,) = find_matches(current, [other])
    assert result.common_interests == ("Chess", "Music")
    assert result.common_skills == ("SQL",)
    assert result.user is other


def test_recommend_groups_skips_joined_and_is_uncapped():
    user = Profile(id="me", interests=("a", "b", "c", "d", "e", "f"))
    groups = [
        GroupProfile(id="joined", interests=("a",), members=frozenset({"me"})),
        GroupProfile(id="none", interests=("zzz",)),
        GroupProfile(id="wide", interests=("A", "B", "C", "D", "E", "F")),
        GroupProfile(id="one", interests=("b",)),
        GroupProfile(id="one-too", interests=("c",)),
    ]
    recs = recommend_groups(user, groups)
    assert [r.group.id for r in recs] == ["wide", "one", "one-too"]
    assert recs[0].relevance_score == 120
    assert recs[0].matched_interests == ("a", "b", "c", "d", "e", "f")
    assert [r.group.id for r in recommend_groups(user, groups, limit=1)] == ["wide"]


@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
def test_scores_are_symmetric_and_bounded(seed):
    rng = random.Random(seed)
    profiles = [_random_profile(rng, f"p{i}") for i in range(25)]
    for a in profiles:
        for b in profiles:
            score = calculate_match_score(a, b)
            assert 0 <= score <= 100
            assert score == calculate_match_score(b, a)
        assert calculate_match_score(a, a) == 0


def test_scoring_is_idempotent_and_does_not_mutate_inputs():
    rng = random.Random(5)
    current = _random_profile(rng, "me")
    pool = [_random_profile(rng, f"p{i}") for i in range(30)]
    snapshot = list(pool)
    first = find_matches(current, pool, limit=30)
    second = find_matches(current, pool, limit=30)
    assert first == second
    assert pool == snapshot
