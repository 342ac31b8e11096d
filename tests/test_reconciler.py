"""
Tests for slide reference reconciliation.
"""

import pytest

from src.agents.architect_agent.errors import ErrorKind, InvalidInputError, ReferenceOutOfBoundsError
from src.agents.architect_agent.reconciler import reconcile_cloning_instructions, reconcile_presentation_plan
from src.agents.architect_agent.validator import validate_cloning_payload, validate_plan_payload


class TestCloningReconciliation:
    def test_valid_references_return_same_object(self, cloning_payload):
        instructions = validate_cloning_payload(cloning_payload([0, 2, 4]))
        assert reconcile_cloning_instructions(instructions, 5) is instructions

    def test_upper_bound_is_exclusive(self, cloning_payload):
        instructions = validate_cloning_payload(cloning_payload([0, 5]))
        with pytest.raises(ReferenceOutOfBoundsError) as exc_info:
            reconcile_cloning_instructions(instructions, 5)

        error = exc_info.value
        assert error.kind is ErrorKind.REFERENCE_OUT_OF_BOUNDS
        assert error.index == 5
        assert error.upper == 5
        assert error.slide_number == 2
        assert "[0, 5)" in str(error)

    def test_first_violation_wins(self, cloning_payload):
        instructions = validate_cloning_payload(cloning_payload([7, 9]))
        with pytest.raises(ReferenceOutOfBoundsError) as exc_info:
            reconcile_cloning_instructions(instructions, 3)
        assert exc_info.value.index == 7

    def test_uses_parsed_count_not_model_count(self, cloning_payload):
        payload = cloning_payload([3])
        payload["structure"]["total_slides"] = 10
        instructions = validate_cloning_payload(payload)
        with pytest.raises(ReferenceOutOfBoundsError):
            reconcile_cloning_instructions(instructions, 2)

    def test_empty_slide_list_passes(self, cloning_payload):
        payload = cloning_payload([])
        payload["structure"]["total_slides"] = 1
        instructions = validate_cloning_payload(payload)
        assert reconcile_cloning_instructions(instructions, 1) is instructions

    @pytest.mark.parametrize("count", [0, -1, True])
    def test_non_positive_total_rejected(self, cloning_payload, count):
        instructions = validate_cloning_payload(cloning_payload([0]))
        with pytest.raises(InvalidInputError):
            reconcile_cloning_instructions(instructions, count)


class TestPlanReconciliation:
    def test_valid_plan(self, plan_payload):
        plan = validate_plan_payload(plan_payload([0, 1, 2]))
        assert reconcile_presentation_plan(plan, 3) is plan

    def test_image_index_out_of_bounds(self, plan_payload):
        plan = validate_plan_payload(plan_payload([0, 3]))
        with pytest.raises(ReferenceOutOfBoundsError) as exc_info:
            reconcile_presentation_plan(plan, 3)
        assert "[0, 3)" in str(exc_info.value)
        assert "template image" in str(exc_info.value)
