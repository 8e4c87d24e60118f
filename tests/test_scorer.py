"""
Tests for the candidate scorer.
"""
import pytest

from sonar.agents.architect.scorer import Scorer
from sonar.models import ActivityLevel, BriefCriteria


@pytest.fixture
def scorer():
    return Scorer()


class TestSkills:

    def test_skill_match_with_primary_language_bonus(self, scorer, make_profile):
        profile = make_profile(languages=[("Rust", 70), ("Python", 30)])

        result = scorer.calculate_score(profile, BriefCriteria(required_skills=["Rust"]))

        # base 50 + 8 matched skill + 5 primary language, low activity adds nothing
        assert result.score == 63
        assert result.match_reasons == ["Knows Rust", "Rust is primary language (70%)"]
        assert result.concerns == ["Low recent activity"]

    def test_no_skill_match_and_inactive(self, scorer, make_profile):
        profile = make_profile(
            languages=[("Python", 100)],
            topics=["web"],
            activity_level=ActivityLevel.INACTIVE,
        )

        result = scorer.calculate_score(profile, BriefCriteria(required_skills=["Go"]))

        assert result.score == 27
        assert result.concerns == ["No matching skills for: Go", "Inactive on GitHub recently"]
        assert result.match_reasons == []

    def test_skill_bonus_capped_at_25(self, scorer, make_profile):
        profile = make_profile(languages=[("TypeScript", 60), ("Python", 40)], topics=["react", "docker", "aws"])
        brief = BriefCriteria(required_skills=["Docker", "React", "AWS", "Python"])

        result = scorer.calculate_score(profile, brief)

        # 4 matches = 32, capped to 25; TypeScript primary does not match
        assert result.score == 75
        assert result.match_reasons == ["Knows Docker, React, AWS, Python"]

    def test_topics_count_as_skills(self, scorer, make_profile):
        profile = make_profile(topics=["kubernetes"])

        result = scorer.calculate_score(profile, BriefCriteria(required_skills=["Kubernetes"]))

        assert result.score == 58

    def test_loose_substring_match_known_limitation(self, scorer, make_profile):
        # "go" is a substring of "mongodb": counted as a match on purpose
        profile = make_profile(languages=[("JavaScript", 100)], topics=["mongodb"])

        result = scorer.calculate_score(profile, BriefCriteria(required_skills=["Go"]))

        assert result.match_reasons[0] == "Knows Go"
        assert result.score == 58

    def test_candidate_skill_inside_required_skill(self, scorer, make_profile):
        profile = make_profile(languages=[("C", 100)])

        assert Scorer.skill_matches("C++", scorer.candidate_skills(profile))

    def test_no_required_skills_is_neutral(self, scorer, make_profile):
        result = scorer.calculate_score(make_profile(languages=[("Go", 100)]), BriefCriteria())

        assert result.score == 50


class TestOtherFactors:

    def test_location_match_is_bidirectional(self, scorer, make_profile):
        brief = BriefCriteria(preferred_location="Berlin")

        result = scorer.calculate_score(make_profile(location="Berlin, Germany"), brief)
        assert result.score == 62
        assert result.match_reasons == ["Located in Berlin, Germany"]

        reverse = scorer.calculate_score(
            make_profile(location="berlin"),
            BriefCriteria(preferred_location="Berlin, Germany"),
        )
        assert reverse.score == 62

    def test_location_mismatch(self, scorer, make_profile):
        result = scorer.calculate_score(make_profile(location="Paris"), BriefCriteria(preferred_location="Berlin"))

        assert result.score == 50

    @pytest.mark.parametrize("age,repos,points", [
        (6.0, 25, 12),
        (5.0, 19, 8),
        (3.0, 10, 8),
        (2.9, 50, 4),
        (1.0, 5, 4),
        (0.9, 100, 0),
        (10.0, 4, 0),
    ])
    def test_account_maturity_tiers(self, scorer, make_profile, age, repos, points):
        profile = make_profile(account_age_years=age, public_repos=repos)

        assert scorer.calculate_score(profile, BriefCriteria()).score == 50 + points

    def test_maturity_reason_only_for_top_tier(self, scorer, make_profile):
        top = scorer.calculate_score(make_profile(account_age_years=7.0, public_repos=30), BriefCriteria())
        mid = scorer.calculate_score(make_profile(account_age_years=4.0, public_repos=12), BriefCriteria())

        assert top.match_reasons == ["7+ years on GitHub with 30 repos"]
        assert mid.match_reasons == []

    @pytest.mark.parametrize("level,points,reasons,concerns", [
        (ActivityLevel.VERY_ACTIVE, 15, ["Very active contributor"], []),
        (ActivityLevel.ACTIVE, 10, ["Active contributor"], []),
        (ActivityLevel.MODERATE, 5, [], []),
        (ActivityLevel.LOW, 0, [], ["Low recent activity"]),
        (ActivityLevel.INACTIVE, -8, [], ["Inactive on GitHub recently"]),
    ])
    def test_activity(self, scorer, make_profile, level, points, reasons, concerns):
        result = scorer.calculate_score(make_profile(activity_level=level), BriefCriteria())

        assert result.score == 50 + points
        assert result.match_reasons == reasons
        assert result.concerns == concerns

    @pytest.mark.parametrize("stars,points,reasons", [
        (2500, 18, ["2,500 total stars"]),
        (100, 10, ["100 stars on projects"]),
        (10, 4, []),
        (9, 0, []),
    ])
    def test_star_tiers(self, scorer, make_profile, stars, points, reasons):
        result = scorer.calculate_score(make_profile(total_stars=stars), BriefCriteria())

        assert result.score == 50 + points
        assert result.match_reasons == reasons

    @pytest.mark.parametrize("followers,points,reasons", [
        (1500, 8, ["1,500 followers"]),
        (100, 4, []),
        (99, 0, []),
    ])
    def test_follower_tiers(self, scorer, make_profile, followers, points, reasons):
        result = scorer.calculate_score(make_profile(followers=followers), BriefCriteria())

        assert result.score == 50 + points
        assert result.match_reasons == reasons

    def test_project_type_matches_topics(self, scorer, make_profile):
        profile = make_profile(topics=["Machine-Learning", "cli"])

        result = scorer.calculate_score(profile, BriefCriteria(project_type="machine-learning"))

        assert result.score == 60
        assert result.match_reasons == ["Has relevant machine-learning projects"]

    def test_hireable(self, scorer, make_profile):
        profile = make_profile(signals={"is_hireable": True, "has_bio": True})

        result = scorer.calculate_score(profile, BriefCriteria())

        assert result.score == 55
        assert result.match_reasons == ["Open to opportunities"]

    def test_incomplete_profile_concern_has_no_score_effect(self, scorer, make_profile):
        profile = make_profile(bio=None, signals={"has_bio": False, "has_website": False})

        result = scorer.calculate_score(profile, BriefCriteria())

        assert result.score == 50
        assert result.concerns == ["Low recent activity", "Limited profile information"]


class TestScoreProperties:

    def _strong_profile(self, make_profile):
        return make_profile(
            languages=[("Python", 80), ("JavaScript", 20)],
            topics=["django", "postgresql", "rest-api"],
            location="Berlin, Germany",
            account_age_years=6.5,
            public_repos=40,
            activity_level=ActivityLevel.VERY_ACTIVE,
            total_stars=1500,
            followers=2000,
            signals={"is_hireable": True, "has_bio": True},
        )

    def _brief(self):
        return BriefCriteria(
            required_skills=["Python", "Django", "PostgreSQL"],
            preferred_location="Berlin",
            project_type="api",
        )

    def test_score_clamped_to_100_with_ordered_reasons(self, scorer, make_profile):
        result = scorer.calculate_score(self._strong_profile(make_profile), self._brief())

        assert result.score == 100
        assert result.match_reasons == [
            "Knows Python, Django, PostgreSQL",
            "Python is primary language (80%)",
            "Located in Berlin, Germany",
            "6.5+ years on GitHub with 40 repos",
            "Very active contributor",
            "1,500 total stars",
            "2,000 followers",
            "Has relevant api projects",
            "Open to opportunities",
        ]
        assert result.concerns == []

    def test_deterministic(self, scorer, make_profile):
        profile = self._strong_profile(make_profile)
        brief = self._brief()

        first = scorer.calculate_score(profile, brief)
        second = Scorer().calculate_score(profile, brief)

        assert first == second

    @pytest.mark.parametrize("level", list(ActivityLevel))
    @pytest.mark.parametrize("skills", [[], ["Go"], ["Python", "Django", "PostgreSQL"]])
    def test_score_always_in_range(self, scorer, make_profile, level, skills):
        profile = make_profile(
            languages=[("Python", 100)],
            topics=["django"],
            activity_level=level,
            total_stars=5000,
            followers=5000,
            account_age_years=10,
            public_repos=100,
        )

        result = scorer.calculate_score(profile, BriefCriteria(required_skills=skills))

        assert 0 <= result.score <= 100
