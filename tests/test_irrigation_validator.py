"""
Tests for the Irrigation Request Validator.

Tests the following behaviors:
1. totalWater must be a positive integer (checked first)
2. Field count must be within 1..10 (explicit fieldCount or list length)
3. Fields without a usable name are dropped silently
4. Out-of-range moisture or negative water need rejects the whole request
5. Names are truncated and input positions preserved as original_index
"""
import pytest
from app.services.irrigation_models import ValidationError
from app.services.irrigation_validator import parse_schedule_request


def make_fields(count):
    return [{"name": f"Field {i}", "moisture": 40, "waterNeeded": 100} for i in range(count)]


class TestBudgetValidation:
    """Tests for request-level budget rules."""

    def test_zero_total_water_rejected(self):
        with pytest.raises(ValidationError, match="Invalid total water amount"):
            parse_schedule_request({"totalWater": 0, "fields": make_fields(2)})

    def test_missing_total_water_rejected(self):
        with pytest.raises(ValidationError, match="Invalid total water amount"):
            parse_schedule_request({"fields": make_fields(2)})

    def test_non_integer_total_water_rejected(self):
        with pytest.raises(ValidationError, match="Invalid total water amount"):
            parse_schedule_request({"totalWater": 10.5, "fields": make_fields(1)})

    def test_total_water_checked_before_field_count(self):
        with pytest.raises(ValidationError, match="Invalid total water amount"):
            parse_schedule_request({"totalWater": -1, "fields": make_fields(11)})

    def test_optional_time_budget_parsed(self):
        _, budget = parse_schedule_request({
            "totalWater": 500, "totalElectricity": 30, "waterDeliveryRate": 10,
            "fields": make_fields(1)
        })
        assert budget.total_water == 500
        assert budget.total_electricity == 30
        assert budget.water_delivery_rate == 10
        assert budget.use_time_constraints is True

    def test_missing_time_budget_falls_back_to_defaults(self):
        _, budget = parse_schedule_request({"totalWater": 500, "fields": make_fields(1)})
        assert budget.total_electricity is None
        assert budget.use_time_constraints is False
        assert budget.effective_electricity == 1000
        assert budget.effective_delivery_rate == 50

    def test_zero_electricity_disables_time_constraints(self):
        _, budget = parse_schedule_request({
            "totalWater": 500, "totalElectricity": 0, "waterDeliveryRate": 10,
            "fields": make_fields(1)
        })
        assert budget.use_time_constraints is False

    def test_non_integer_electricity_rejected(self):
        with pytest.raises(ValidationError, match="Invalid electricity budget"):
            parse_schedule_request({"totalWater": 500, "totalElectricity": "lots", "fields": make_fields(1)})

    def test_dp_capacity_enforced_when_requested(self):
        with pytest.raises(ValidationError, match="dynamic programming capacity"):
            parse_schedule_request({"totalWater": 501, "fields": make_fields(1)}, max_total_water=500)

    def test_non_object_request_rejected(self):
        with pytest.raises(ValidationError, match="Invalid input data"):
            parse_schedule_request(["not", "a", "dict"])


class TestFieldCountValidation:
    """Tests for field count limits."""

    def test_eleven_fields_rejected(self):
        with pytest.raises(ValidationError, match="Invalid field count"):
            parse_schedule_request({"totalWater": 100, "fields": make_fields(11)})

    def test_ten_fields_accepted(self):
        fields, _ = parse_schedule_request({"totalWater": 100, "fields": make_fields(10)})
        assert len(fields) == 10

    def test_explicit_zero_field_count_rejected(self):
        with pytest.raises(ValidationError, match="Invalid field count"):
            parse_schedule_request({"totalWater": 100, "fieldCount": 0, "fields": make_fields(2)})

    def test_missing_fields_with_field_count_rejected(self):
        with pytest.raises(ValidationError, match="Fields array not found"):
            parse_schedule_request({"totalWater": 100, "fieldCount": 2})

    def test_missing_fields_without_field_count_is_a_count_error(self):
        with pytest.raises(ValidationError, match="Invalid field count"):
            parse_schedule_request({"totalWater": 100})

    def test_field_count_limits_considered_fields(self):
        fields, _ = parse_schedule_request({"totalWater": 100, "fieldCount": 2, "fields": make_fields(5)})
        assert [f.name for f in fields] == ["Field 0", "Field 1"]


class TestFieldValidation:
    """Tests for per-field rules."""

    def test_unnamed_field_dropped_and_index_preserved(self):
        fields, _ = parse_schedule_request({
            "totalWater": 100,
            "fields": [
                {"name": "", "moisture": 10, "waterNeeded": 50},
                {"moisture": 20, "waterNeeded": 50},
                {"name": "Keep", "moisture": 30, "waterNeeded": 50},
            ]
        })
        assert len(fields) == 1
        assert fields[0].name == "Keep"
        assert fields[0].original_index == 2

    def test_non_string_name_dropped(self):
        fields, _ = parse_schedule_request({
            "totalWater": 100,
            "fields": [{"name": 42, "moisture": 10, "waterNeeded": 50}, {"name": "B", "moisture": 10, "waterNeeded": 50}]
        })
        assert [f.name for f in fields] == ["B"]

    def test_all_fields_dropped_rejected(self):
        with pytest.raises(ValidationError, match="No valid fields supplied"):
            parse_schedule_request({"totalWater": 100, "fields": [{"moisture": 10, "waterNeeded": 5}]})

    def test_moisture_above_range_rejects_request(self):
        with pytest.raises(ValidationError, match="Invalid moisture level") as exc_info:
            parse_schedule_request({
                "totalWater": 100,
                "fields": [
                    {"name": "Good", "moisture": 50, "waterNeeded": 10},
                    {"name": "Soaked", "moisture": 101, "waterNeeded": 10},
                ]
            })
        assert "Soaked" in exc_info.value.details

    def test_negative_moisture_rejects_request(self):
        with pytest.raises(ValidationError, match="Invalid moisture level"):
            parse_schedule_request({"totalWater": 100, "fields": [{"name": "A", "moisture": -1, "waterNeeded": 10}]})

    def test_negative_water_needed_rejects_request(self):
        with pytest.raises(ValidationError, match="Invalid water needed"):
            parse_schedule_request({"totalWater": 100, "fields": [{"name": "A", "moisture": 10, "waterNeeded": -5}]})

    def test_fractional_moisture_rejected(self):
        with pytest.raises(ValidationError, match="Invalid moisture level"):
            parse_schedule_request({"totalWater": 100, "fields": [{"name": "A", "moisture": 12.5, "waterNeeded": 10}]})

    def test_integral_floats_accepted(self):
        fields, _ = parse_schedule_request({"totalWater": 100.0, "fields": [{"name": "A", "moisture": 12.0, "waterNeeded": 60.0}]})
        assert fields[0].moisture == 12
        assert fields[0].water_needed == 60

    def test_missing_numbers_default_to_zero(self):
        fields, _ = parse_schedule_request({"totalWater": 100, "fields": [{"name": "A"}]})
        assert fields[0].moisture == 0
        assert fields[0].water_needed == 0

    def test_boundary_moisture_values_accepted(self):
        fields, _ = parse_schedule_request({
            "totalWater": 100,
            "fields": [{"name": "Dry", "moisture": 0, "waterNeeded": 10}, {"name": "Wet", "moisture": 100, "waterNeeded": 10}]
        })
        assert [f.moisture for f in fields] == [0, 100]

    def test_long_name_truncated(self):
        fields, _ = parse_schedule_request({"totalWater": 100, "fields": [{"name": "x" * 150, "moisture": 10, "waterNeeded": 10}]})
        assert len(fields[0].name) == 99

    def test_fields_start_unscheduled(self):
        fields, _ = parse_schedule_request({"totalWater": 100, "fields": make_fields(3)})
        assert all(not f.scheduled and f.allocated == 0 for f in fields)
        assert [f.original_index for f in fields] == [0, 1, 2]
