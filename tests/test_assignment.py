"""Tests for priority-ordered bay assignment."""

from datetime import timedelta

import pytest

from bay_scheduler.schemas.shop_schema import Bay
from bay_scheduler.tools.assignment import BayAssignmentPolicy
from bay_scheduler.tools.availability import Verdict
from bay_scheduler.tools.timewindow import Window
from tests.conftest import MONDAY, SUNDAY, make_appointment

TEN_AM = Window(MONDAY.replace(hour=10), MONDAY.replace(hour=10) + timedelta(hours=1))


class TestAssign:
    def test_bay1_preferred_when_both_free(self, policy):
        assert policy.assign(TEN_AM, []).id == "bay1"

    def test_bay2_when_bay1_busy(self, policy):
        known = [make_appointment(MONDAY.replace(hour=10))]
        assert policy.assign(TEN_AM, known).id == "bay2"

    def test_exhausted_when_both_busy(self, policy):
        known = [
            make_appointment(MONDAY.replace(hour=10), bay_id="bay1"),
            make_appointment(MONDAY.replace(hour=10), bay_id="bay2"),
        ]
        assert policy.assign(TEN_AM, known) is None

    def test_bay1_again_once_free(self, policy):
        known = [make_appointment(MONDAY.replace(hour=10), bay_id="bay2")]
        assert policy.assign(TEN_AM, known).id == "bay1"

    def test_closed_day_exhausts(self, policy):
        window = Window(SUNDAY.replace(hour=10), SUNDAY.replace(hour=11))
        assert policy.assign(window, []) is None


class TestCheckBay:
    def test_committed_bay_revalidated_alone(self, policy):
        known = [make_appointment(MONDAY.replace(hour=10), bay_id="bay2")]
        assert policy.check_bay(TEN_AM, "bay2", known) is Verdict.CONFLICT
        assert policy.check_bay(TEN_AM, "bay1", known) is Verdict.AVAILABLE

    def test_get_bay(self, policy):
        assert policy.get_bay("bay2").display_name == "Service Bay 2"
        assert policy.get_bay("bay9") is None


class TestPolicyConstruction:
    def test_requires_bays(self, engine):
        with pytest.raises(ValueError):
            BayAssignmentPolicy(engine, [])

    def test_rejects_duplicate_ids(self, engine):
        bay = Bay(id="bay1", display_name="Service Bay 1")
        with pytest.raises(ValueError, match="Duplicate"):
            BayAssignmentPolicy(engine, [bay, bay])
