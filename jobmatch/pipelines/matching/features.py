"""
Dimension Scores for Candidate/Job Matching.

Responsibilities:
- Compute the skills, location, salary and experience sub-scores
  between one job and one candidate.

Non-Responsibilities:
- No weighting logic.
- No threshold logic.
- No persistence.

Invariant:
Every function returns a value in [0, 1] and never raises for missing
data; gaps map to a documented default instead.
"""

from ...models import Candidate, Job

REQUIRED_SKILLS_WEIGHT = 0.7
OPTIONAL_SKILLS_WEIGHT = 0.3
MISSING_REQUIRED_SKILL_SCORE = 0.2

AREA_MATCH = 1.0
CITY_MATCH = 0.9
STATE_MATCH = 0.7
COUNTRY_MATCH = 0.5
NO_LOCATION_MATCH = 0.0

NEUTRAL_SALARY_SCORE = 0.5


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def skills_score(job: Job, candidate: Candidate) -> float:
    """
    Required skills gate the score; optional skills refine it.

    Missing any required skill drops to a floor of 0.2 rather than zero.
    """
    if not job.skills:
        return 1.0

    candidate_skill_ids = candidate.skill_ids
    if not candidate_skill_ids:
        return 0.0

    required = job.required_skill_ids
    optional = job.optional_skill_ids

    if required and not required <= candidate_skill_ids:
        return MISSING_REQUIRED_SKILL_SCORE

    if optional:
        optional_score = len(optional & candidate_skill_ids) / len(optional)
    else:
        optional_score = 1.0

    return REQUIRED_SKILLS_WEIGHT * 1.0 + OPTIONAL_SKILLS_WEIGHT * optional_score


def location_score(job: Job, candidate: Candidate) -> float:
    """Most specific shared level wins: area, city, state, then country."""
    profile = candidate.profile
    if profile is None:
        return NO_LOCATION_MATCH

    job_loc = job.location
    cand_loc = profile.location

    levels = (
        (job_loc.area_id, cand_loc.area_id, AREA_MATCH),
        (job_loc.city_id, cand_loc.city_id, CITY_MATCH),
        (job_loc.state_id, cand_loc.state_id, STATE_MATCH),
        (job_loc.country_id, cand_loc.country_id, COUNTRY_MATCH),
    )
    for job_id, cand_id, score in levels:
        if job_id and cand_id == job_id:
            return score

    return NO_LOCATION_MATCH


def salary_score(job: Job, candidate: Candidate) -> float:
    """
    Overlap of the two salary ranges relative to each range's length.

    The smaller of the two ratios is used, so the score is the same
    whichever range is wider.
    """
    profile = candidate.profile
    if profile is None or not profile.salary.is_complete:
        return NEUTRAL_SALARY_SCORE
    if not job.salary.is_complete:
        return NEUTRAL_SALARY_SCORE

    job_min, job_max = float(job.salary.minimum), float(job.salary.maximum)
    cand_min, cand_max = float(profile.salary.minimum), float(profile.salary.maximum)

    if job_max < cand_min or cand_max < job_min:
        return 0.0

    overlap = min(job_max, cand_max) - max(job_min, cand_min)
    job_range = job_max - job_min
    cand_range = cand_max - cand_min

    if job_range <= 0 or cand_range <= 0:
        return 1.0

    return _clamp(min(overlap / job_range, overlap / cand_range))


def experience_score(job: Job, candidate: Candidate) -> float:
    """Average years across the candidate's skills versus the job's requirement."""
    if not job.experience_years:
        return 1.0

    if not candidate.skills:
        return 0.0

    total_years = sum(s.years_of_experience for s in candidate.skills)
    average = total_years / len(candidate.skills)

    if average >= job.experience_years:
        return 1.0

    return _clamp(average / job.experience_years)
