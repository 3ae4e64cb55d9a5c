"""Property-based tests for skill-tag matching."""

from hypothesis import given, strategies as st

from sathi_seva.core.models import Job
from sathi_seva.jobs.tags import filter_jobs, matches


TAG_POOL = [
    "Plumbing", "Pipe Repair", "Cooking", "Meal Prep", "Gardening",
    "Wiring", "Electrical Work", "Tutoring", "plumbing", "Pet Care",
]

tag_lists = st.lists(st.sampled_from(TAG_POOL), max_size=6)


def make_job(tags, **overrides):
    fields = {
        "client_id": "client-1",
        "title": "Fix the sink",
        "amount": 500,
        "required_tags": tags,
    }
    fields.update(overrides)
    return Job(**fields)


class TestTagMatchingProperties:
    """Properties of the at-least-one-shared-tag rule."""

    @given(skills=tag_lists, tags=tag_lists)
    def test_match_iff_intersection_non_empty(self, skills, tags):
        assert matches(skills, tags) == bool(set(skills) & set(tags))

    @given(skills=tag_lists, tags=tag_lists)
    def test_match_is_symmetric(self, skills, tags):
        assert matches(skills, tags) == matches(tags, skills)

    @given(tags=tag_lists)
    def test_empty_skills_never_match(self, tags):
        assert matches([], tags) is False
        assert matches(tags, []) is False

    @given(skills=tag_lists, tags=tag_lists, extra=st.sampled_from(TAG_POOL))
    def test_adding_a_skill_never_loses_a_match(self, skills, tags, extra):
        if matches(skills, tags):
            assert matches(skills + [extra], tags)

    @given(skills=tag_lists, tag_sets=st.lists(tag_lists, max_size=5))
    def test_filter_keeps_exactly_the_matching_jobs(self, skills, tag_sets):
        jobs = [make_job(tags, title=f"Job {index}") for index, tags in enumerate(tag_sets)]

        kept = filter_jobs(skills, jobs)

        assert [job.id for job in kept] == [job.id for job in jobs if matches(skills, job.required_tags)]


class TestTagMatchingExamples:
    """Concrete matching cases."""

    def test_single_shared_tag_is_enough(self):
        assert matches(["Plumbing", "Cooking"], ["Plumbing", "Pipe Repair"])

    def test_comparison_is_case_sensitive(self):
        assert not matches(["plumbing"], ["Plumbing"])

    def test_accepts_sets_and_generators(self):
        assert matches({"Cooking"}, (tag for tag in ["Meal Prep", "Cooking"]))
