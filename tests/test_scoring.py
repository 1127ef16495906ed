"""
Tests for the weighted aggregator and its configuration.
"""

import pytest

from jobmatch.config import MatchingConfig, MatchWeights
from jobmatch.models import (
    Candidate,
    CandidateProfile,
    CandidateSkill,
    Job,
    JobSkill,
    Location,
    SalaryRange,
    ScoreBreakdown,
)
from jobmatch.pipelines.matching.scoring import MatchAggregator


@pytest.fixture
def scenario_pair():
    job = Job(
        id=1,
        title="Python Developer",
        skills=(JobSkill(1, True), JobSkill(2, False)),
        salary=SalaryRange(50000, 70000),
        location=Location(country_id=1, state_id=5, city_id=10),
        experience_years=2,
    )
    candidate = Candidate(
        id=7,
        profile=CandidateProfile(
            salary=SalaryRange(55000, 65000),
            location=Location(country_id=1, state_id=5, city_id=10),
        ),
        skills=(CandidateSkill(1, 3),),
    )
    return job, candidate


class TestMatchAggregator:
    """Test weighted totals."""

    def test_scenario_total(self, scenario_pair):
        """0.4*0.7 + 0.3*0.9 + 0.2*0.5 + 0.1*1.0 = 0.75."""
        job, candidate = scenario_pair
        result = MatchAggregator().score(job, candidate)

        assert result.breakdown.skills == pytest.approx(0.7)
        assert result.breakdown.location == 0.9
        assert result.breakdown.salary == pytest.approx(0.5)
        assert result.breakdown.experience == 1.0
        assert result.total == 0.75

    def test_total_rounded_to_four_places(self):
        breakdown = ScoreBreakdown(skills=0.33333, location=0.123456, salary=0.987654, experience=0.5)
        total = MatchAggregator().aggregate(breakdown).total
        assert total == round(total, 4)

    def test_all_ones_is_one(self):
        breakdown = ScoreBreakdown(1.0, 1.0, 1.0, 1.0)
        assert MatchAggregator().aggregate(breakdown).total == 1.0

    def test_all_zeros_is_zero(self):
        breakdown = ScoreBreakdown(0.0, 0.0, 0.0, 0.0)
        assert MatchAggregator().aggregate(breakdown).total == 0.0

    def test_total_within_unit_interval(self):
        aggregator = MatchAggregator()
        values = [0.0, 0.2, 0.5, 0.7, 0.9, 1.0]
        for s in values:
            for l in values:
                total = aggregator.aggregate(ScoreBreakdown(s, l, 1.0 - s, l)).total
                assert 0.0 <= total <= 1.0

    def test_alternate_weights(self):
        """Skills-only weights make the total equal the skills score."""
        config = MatchingConfig(weights=MatchWeights(skills=1.0, location=0.0, salary=0.0, experience=0.0))
        breakdown = ScoreBreakdown(skills=0.2, location=1.0, salary=1.0, experience=1.0)
        assert MatchAggregator(config).aggregate(breakdown).total == 0.2

    def test_thresholds(self):
        aggregator = MatchAggregator()
        assert not aggregator.is_admissible(0.4999)
        assert aggregator.is_admissible(0.5)
        assert not aggregator.is_notifiable(0.6999)
        assert aggregator.is_notifiable(0.7)

    def test_breakdown_is_returned_with_total(self, scenario_pair):
        job, candidate = scenario_pair
        result = MatchAggregator().score(job, candidate)
        assert set(result.breakdown.as_dict()) == {"skills", "location", "salary", "experience"}


class TestMatchingConfig:
    """Test weight and threshold validation."""

    def test_default_weights(self):
        weights = MatchWeights()
        assert weights.as_dict() == {"skills": 0.4, "location": 0.3, "salary": 0.2, "experience": 0.1}

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError, match="sum to 1.0"):
            MatchWeights(skills=0.5, location=0.5, salary=0.5, experience=0.0)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            MatchWeights(skills=1.2, location=-0.2, salary=0.0, experience=0.0)

    def test_threshold_range(self):
        with pytest.raises(ValueError):
            MatchingConfig(admission_threshold=1.5)

    def test_notification_threshold_not_below_admission(self):
        with pytest.raises(ValueError):
            MatchingConfig(admission_threshold=0.6, notification_threshold=0.5)
