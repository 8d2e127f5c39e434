"""Tests for the deterministic eligibility filter."""

import itertools

import pytest

from app.models.program import ProgramRecord
from app.models.situation import Nationality, UserSituation
from app.models.simulation import DecisionStage
from app.services.eligibility_service import EligibilityService, matches_nationality, matches_profile


def _record(record_id: str, name: str, **kwargs) -> ProgramRecord:
    return ProgramRecord(id=record_id, name=name, **kwargs)


def _situation(**overrides) -> UserSituation:
    data = {
        "age": 30,
        "nationality": "citizen",
        "region": "ile-de-france",
        "housing_status": "renter",
        "employment_status": "employed",
    }
    data.update(overrides)
    return UserSituation(**data)


@pytest.fixture
def service() -> EligibilityService:
    return EligibilityService()


class TestNationalityRule:
    """The nationality rule only excludes on explicit strict markers."""

    @pytest.mark.parametrize("allowed", [[], ["all"], ["ALL"]])
    def test_open_lists_admit_everyone(self, allowed) -> None:
        for nationality in Nationality:
            assert matches_nationality(allowed, nationality)

    def test_citizen_only_excludes_non_eu(self) -> None:
        assert not matches_nationality(["french_only"], Nationality.NON_EU)
        assert matches_nationality(["french_only"], Nationality.CITIZEN)

    def test_eu_entries_admit_eu_nationals(self) -> None:
        assert matches_nationality(["eu_only"], Nationality.EU)
        assert not matches_nationality(["eu_only"], Nationality.NON_EU)

    def test_non_eu_entry_does_not_admit_eu(self) -> None:
        # No strict marker, so the record is kept anyway
        assert matches_nationality(["non-eu"], Nationality.EU)
        assert matches_nationality(["non-eu"], Nationality.NON_EU)

    def test_residence_permit_entry_admits_non_eu(self) -> None:
        assert matches_nationality(["french_only", "titre_de_sejour"], Nationality.NON_EU)

    def test_unknown_entries_are_permissive(self) -> None:
        assert matches_nationality(["french", "eu"], Nationality.NON_EU)


class TestProfileRule:
    def test_missing_or_all_profile_passes(self) -> None:
        situation = _situation(employment_status="retired")
        assert matches_profile(None, situation)
        assert matches_profile("all", situation)

    def test_student_profile(self) -> None:
        assert matches_profile("students", _situation(employment_status="student"))
        assert matches_profile("Étudiants", _situation(residence_status="etudiant"))
        assert not matches_profile("students", _situation(employment_status="employed"))

    def test_worker_profile(self) -> None:
        assert matches_profile("workers", _situation(employment_status="self-employed"))
        assert not matches_profile("workers", _situation(employment_status="student"))

    def test_jobseeker_profile(self) -> None:
        assert matches_profile("jobSeekers", _situation(employment_status="unemployed"))
        assert matches_profile("job-seekers", _situation(residence_status="job-seeker"))
        assert not matches_profile("jobseekers", _situation(employment_status="student"))

    def test_unknown_profile_passes(self) -> None:
        assert matches_profile("retirees", _situation(employment_status="student"))


class TestEligibilityService:
    def test_owner_excluded_from_rent_linked_housing(self, service: EligibilityService) -> None:
        apl = _record("apl", "APL - Aide personnalisée au logement", category="housing")

        owner = service.evaluate(apl, _situation(housing_status="owner"))
        renter = service.evaluate(apl, _situation(housing_status="renter"))

        assert not owner.eligible
        assert owner.stage == DecisionStage.HARD_RULE
        assert renter.eligible

    def test_owner_keeps_non_rent_linked_housing(self, service: EligibilityService) -> None:
        record = _record("renovation", "MaPrimeRénov'", category="logement")
        assert service.evaluate(record, _situation(housing_status="owner")).eligible

    def test_childless_excluded_from_child_programs(self, service: EligibilityService) -> None:
        record = _record("af", "Allocations familiales", category="family",
                         eligibility={"requires_children": True})

        assert not service.evaluate(record, _situation(has_children=False)).eligible
        assert service.evaluate(record, _situation(has_children=True, number_of_children=2)).eligible

    def test_age_bounds(self, service: EligibilityService) -> None:
        record = _record("jeunes", "Aide jeunes", eligibility={"age_range": {"min": 18, "max": 25}})

        assert service.evaluate(record, _situation(age=20)).eligible
        assert not service.evaluate(record, _situation(age=17)).eligible
        assert not service.evaluate(record, _situation(age=26)).eligible

    def test_legacy_age_fields(self, service: EligibilityService) -> None:
        record = _record("seniors", "Aide seniors", eligibility={"min_age": 65})
        assert not service.evaluate(record, _situation(age=40)).eligible

    def test_zero_bounds_are_ignored(self, service: EligibilityService) -> None:
        record = _record("any", "Aide", eligibility={"age_range": {"min": 0, "max": 0}})
        assert service.evaluate(record, _situation(age=70)).eligible

    def test_filter_is_order_independent(self, service: EligibilityService) -> None:
        records = [
            _record("apl", "APL - Aide personnalisée au logement", category="housing"),
            _record("af", "Allocations familiales", eligibility={"requires_children": True}),
            _record("css", "Complémentaire santé solidaire", category="health"),
            _record("fr", "Aide réservée", eligibility={"nationality": ["french_only"]}),
            _record("etu", "Aide étudiante", profile_type="students"),
        ]
        situation = _situation(nationality="non-eu", housing_status="owner")

        expected = {record.id for record in service.filter_candidates(records, situation)}
        assert expected == {"css"}

        for permutation in itertools.permutations(records):
            survivors = service.filter_candidates(list(permutation), situation)
            assert {record.id for record in survivors} == expected
            # Survivors keep their relative input order
            assert [r.id for r in survivors] == [r.id for r in permutation if r.id in expected]
