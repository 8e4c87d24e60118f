"""
Scorer - The Architect Agent

This module calculates a 0-100 match score for an enriched GitHub profile
against a brief. It is a flat additive heuristic starting from 50:
1. Skills: languages and topics matched against required skills
2. Location: preferred location match
3. Account maturity: account age and public repo count
4. Activity: recent public events
5. Stars and followers: community signal
6. Project type: topic match
7. Hireability and profile completeness

Factors are evaluated in that fixed order, so reasons and concerns always come
out in the same order for the same input.

Author: Sonar
"""
from typing import List, Tuple

from ...models import ActivityLevel, BriefCriteria, CandidateProfile, ScoreResult


class Scorer:
    """
    Scores candidates against a brief.

    Pure and stateless: no I/O and no hidden state, the same
    (profile, brief) pair always yields the same ScoreResult.
    """

    BASE_SCORE = 50
    MIN_SCORE = 0
    MAX_SCORE = 100

    # Skills
    SKILL_POINTS = 8
    SKILL_CAP = 25
    PRIMARY_LANGUAGE_BONUS = 5
    NO_SKILL_PENALTY = -15

    LOCATION_BONUS = 12

    # (min account age in years, min public repos, points, emit reason)
    MATURITY_TIERS = [
        (5, 20, 12, True),
        (3, 10, 8, False),
        (1, 5, 4, False),
    ]

    # activity level -> (points, reason, concern)
    ACTIVITY_POINTS = {
        ActivityLevel.VERY_ACTIVE: (15, "Very active contributor", None),
        ActivityLevel.ACTIVE: (10, "Active contributor", None),
        ActivityLevel.MODERATE: (5, None, None),
        ActivityLevel.LOW: (0, None, "Low recent activity"),
        ActivityLevel.INACTIVE: (-8, None, "Inactive on GitHub recently"),
    }

    # (min total stars, points)
    STAR_TIERS = [(1000, 18), (100, 10), (10, 4)]

    # (min followers, points)
    FOLLOWER_TIERS = [(1000, 8), (100, 4)]

    PROJECT_TYPE_BONUS = 10
    HIREABLE_BONUS = 5

    def calculate_score(self, profile: CandidateProfile, brief: BriefCriteria) -> ScoreResult:
        """
        Calculate the match score.

        Args:
            profile: Enriched candidate profile
            brief: Search criteria

        Returns:
            ScoreResult with clamped score, match reasons and concerns
        """
        score = self.BASE_SCORE
        reasons: List[str] = []
        concerns: List[str] = []

        score += self._score_skills(profile, brief, reasons, concerns)
        score += self._score_location(profile, brief, reasons)
        score += self._score_maturity(profile, reasons)
        score += self._score_activity(profile, reasons, concerns)
        score += self._score_stars(profile, reasons)
        score += self._score_followers(profile, reasons)
        score += self._score_project_type(profile, brief, reasons)

        if profile.signals.is_hireable:
            score += self.HIREABLE_BONUS
            reasons.append("Open to opportunities")

        if not profile.signals.has_bio and not profile.signals.has_website:
            concerns.append("Limited profile information")

        return ScoreResult(
            score=max(self.MIN_SCORE, min(self.MAX_SCORE, score)),
            match_reasons=reasons,
            concerns=concerns,
        )

    @staticmethod
    def candidate_skills(profile: CandidateProfile) -> List[str]:
        """Lowercased language names followed by lowercased topics."""
        return [lang.name.lower() for lang in profile.languages] + [topic.lower() for topic in profile.topics]

    @staticmethod
    def skill_matches(required: str, candidate_skills: List[str]) -> bool:
        """
        Loose bidirectional substring test.

        "Go" matches "mongodb" and "django" matches "go"; false positives of
        this kind are accepted.
        """
        needle = required.lower()
        return any(needle in skill or skill in needle for skill in candidate_skills)

    def _score_skills(
        self,
        profile: CandidateProfile,
        brief: BriefCriteria,
        reasons: List[str],
        concerns: List[str],
    ) -> int:
        if not brief.required_skills:
            return 0

        skills = self.candidate_skills(profile)
        matched = [skill for skill in brief.required_skills if self.skill_matches(skill, skills)]

        if not matched:
            concerns.append(f"No matching skills for: {', '.join(brief.required_skills)}")
            return self.NO_SKILL_PENALTY

        points = min(len(matched) * self.SKILL_POINTS, self.SKILL_CAP)
        reasons.append(f"Knows {', '.join(matched)}")

        primary = profile.languages[0] if profile.languages else None
        if primary and any(skill.lower() in primary.name.lower() for skill in brief.required_skills):
            points += self.PRIMARY_LANGUAGE_BONUS
            reasons.append(f"{primary.name} is primary language ({primary.percentage}%)")

        return points

    def _score_location(self, profile: CandidateProfile, brief: BriefCriteria, reasons: List[str]) -> int:
        if not brief.preferred_location or not profile.location:
            return 0

        wanted = brief.preferred_location.lower()
        actual = profile.location.lower()
        if wanted in actual or actual in wanted:
            reasons.append(f"Located in {profile.location}")
            return self.LOCATION_BONUS
        return 0

    def _score_maturity(self, profile: CandidateProfile, reasons: List[str]) -> int:
        for min_age, min_repos, points, with_reason in self.MATURITY_TIERS:
            if profile.account_age_years >= min_age and profile.public_repos >= min_repos:
                if with_reason:
                    reasons.append(
                        f"{profile.account_age_years:g}+ years on GitHub with {profile.public_repos} repos"
                    )
                return points
        return 0

    def _score_activity(self, profile: CandidateProfile, reasons: List[str], concerns: List[str]) -> int:
        points, reason, concern = self.ACTIVITY_POINTS[profile.activity_level]
        if reason:
            reasons.append(reason)
        if concern:
            concerns.append(concern)
        return points

    def _score_stars(self, profile: CandidateProfile, reasons: List[str]) -> int:
        stars = profile.total_stars
        points = self._tier_points(stars, self.STAR_TIERS)
        if stars >= 1000:
            reasons.append(f"{stars:,} total stars")
        elif stars >= 100:
            reasons.append(f"{stars} stars on projects")
        return points

    def _score_followers(self, profile: CandidateProfile, reasons: List[str]) -> int:
        followers = profile.followers
        points = self._tier_points(followers, self.FOLLOWER_TIERS)
        if followers >= 1000:
            reasons.append(f"{followers:,} followers")
        return points

    def _score_project_type(self, profile: CandidateProfile, brief: BriefCriteria, reasons: List[str]) -> int:
        if not brief.project_type:
            return 0

        project_type = brief.project_type.lower()
        if any(project_type in topic.lower() for topic in profile.topics):
            reasons.append(f"Has relevant {brief.project_type} projects")
            return self.PROJECT_TYPE_BONUS
        return 0

    @staticmethod
    def _tier_points(value: int, tiers: List[Tuple[int, int]]) -> int:
        """Points of the highest tier whose threshold `value` reaches."""
        for threshold, points in tiers:
            if value >= threshold:
                return points
        return 0
