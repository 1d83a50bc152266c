"""Tests for incident filter specifications."""

from parks_incidents.domain.enums import IncidentCategory, IncidentSeverity, IncidentStatus
from parks_incidents.domain.specifications import (
    AssigneeSpecification,
    CategorySpecification,
    MatchAllSpecification,
    ParkSpecification,
    SearchTextSpecification,
    SeveritySpecification,
    StatusSpecification,
)


class TestSearchTextSpecification:
    def test_matches_title_case_insensitively(self, make_incident):
        assert SearchTextSpecification("SWING").is_satisfied_by(make_incident())

    def test_matches_reporter_name(self, make_incident):
        assert SearchTextSpecification("lópez").is_satisfied_by(make_incident())

    def test_blank_search_matches_everything(self, make_incident):
        assert SearchTextSpecification("  ").is_satisfied_by(make_incident())

    def test_explains_mismatch(self, make_incident):
        spec = SearchTextSpecification("fountain")

        assert not spec.is_satisfied_by(make_incident())
        assert "fountain" in spec.why_not_satisfied(make_incident())


class TestFieldSpecifications:
    def test_park(self, make_incident):
        incident = make_incident(park_id=3)

        assert ParkSpecification(3).is_satisfied_by(incident)
        assert ParkSpecification(1).why_not_satisfied(incident) == "Incident 1 belongs to park 3, not 1"

    def test_status_category_and_severity(self, make_incident):
        incident = make_incident()

        assert StatusSpecification(IncidentStatus.PENDING).is_satisfied_by(incident)
        assert CategorySpecification(IncidentCategory.DAMAGE).is_satisfied_by(incident)
        assert not SeveritySpecification(IncidentSeverity.LOW).is_satisfied_by(incident)

    def test_unassigned(self, make_incident):
        unassigned = AssigneeSpecification(None)

        assert unassigned.is_satisfied_by(make_incident())
        assert not unassigned.is_satisfied_by(make_incident(assigned_to_id=7))
        assert AssigneeSpecification(7).is_satisfied_by(make_incident(assigned_to_id=7))


class TestComposition:
    def test_and_requires_both(self, make_incident):
        spec = ParkSpecification(3).and_(StatusSpecification(IncidentStatus.IN_PROGRESS))
        incident = make_incident()

        assert not spec.is_satisfied_by(incident)
        assert spec.why_not_satisfied(incident) == "Incident 1 is pending, not in_progress"

    def test_chained_and_explains_every_failing_part(self, make_incident):
        spec = (
            ParkSpecification(1)
            .and_(StatusSpecification(IncidentStatus.IN_PROGRESS))
            .and_(SeveritySpecification(IncidentSeverity.HIGH))
        )

        assert spec.why_not_satisfied(make_incident()) == (
            "Incident 1 belongs to park 3, not 1 AND Incident 1 is pending, not in_progress"
        )

    def test_match_all_is_neutral(self, make_incident):
        spec = MatchAllSpecification().and_(ParkSpecification(3))

        assert spec.is_satisfied_by(make_incident(park_id=3))
        assert not spec.is_satisfied_by(make_incident(park_id=4))
