"""Unit tests for the billing engine."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import InvalidBillingInput
from app.models.enums import LateFeeMode, LineItemKind, RentalType
from app.schemas.billing import (
    AdditionalCharge,
    BillingInput,
    BillingPolicy,
    MeterSnapshot,
    RoomRates,
)
from app.services.billing import (
    allocate_minor_units,
    calculate_bill,
    compute_late_fee,
    compute_usage,
    due_date_for,
    to_minor_units,
)

PER_DAY_POLICY = BillingPolicy(late_fee_mode=LateFeeMode.PER_DAY, late_fee_amount=Decimal("100"))


def make_room(**overrides) -> RoomRates:
    """Helper: a room with the rates used throughout these tests."""
    values = {
        "id": 1,
        "number": "101",
        "rate_monthly": Decimal("3000"),
        "rate_daily": Decimal("150"),
        "water_rate": Decimal("20"),
        "electric_rate": Decimal("8"),
    }
    values.update(overrides)
    return RoomRates(**values)


def make_input(
    previous: tuple[date, str, str] = (date(2024, 3, 1), "100", "500"),
    current: tuple[date, str, str] = (date(2024, 3, 30), "115", "540"),
    **overrides,
) -> BillingInput:
    """Helper: a billing input from (date, water, electric) tuples."""
    values = {
        "room": make_room(),
        "previous": MeterSnapshot(
            room_id=1,
            reading_date=previous[0],
            water=Decimal(previous[1]),
            electric=Decimal(previous[2]),
        ),
        "current": MeterSnapshot(
            room_id=1,
            reading_date=current[0],
            water=Decimal(current[1]),
            electric=Decimal(current[2]),
        ),
        "rental_type": RentalType.MONTHLY,
        "pay_date": date(2024, 3, 30),
    }
    values.update(overrides)
    return BillingInput(**values)


class TestExampleScenarios:
    """End-to-end calculations for typical bills."""

    def test_monthly_bill_without_extras(self) -> None:
        """Test a plain monthly bill: rent plus metered utilities."""
        summary = calculate_bill(make_input())

        assert summary.water_usage == Decimal("15")
        assert summary.electric_usage == Decimal("40")
        assert summary.water_charge == Decimal("300")
        assert summary.electric_charge == Decimal("320")
        assert summary.base_rent == Decimal("3000")
        assert summary.late_fee == Decimal("0")
        assert summary.total == Decimal("3620")
        assert summary.days_in_period == 29
        assert summary.billed_days is None

    def test_daily_same_day_bills_one_day(self) -> None:
        """Test a zero-length daily rental still bills one day."""
        same_day = date(2024, 3, 10)
        summary = calculate_bill(
            make_input(
                previous=(same_day, "100", "500"),
                current=(same_day, "100", "500"),
                rental_type=RentalType.DAILY,
            )
        )

        assert summary.days_in_period == 0
        assert summary.billed_days == 1
        assert summary.base_rent == Decimal("150")
        assert summary.water_charge == Decimal("0")
        assert summary.electric_charge == Decimal("0")
        assert summary.total == Decimal("150")

    def test_electric_meter_rollover(self) -> None:
        """Test a reset electric meter uses the current reading as usage."""
        summary = calculate_bill(
            make_input(
                previous=(date(2024, 3, 1), "100", "9980"),
                current=(date(2024, 3, 30), "115", "50"),
            )
        )

        assert summary.electric_usage == Decimal("50")
        assert summary.electric_charge == Decimal("400")
        assert summary.electric_estimated is True
        assert summary.water_estimated is False

        electric_line = next(i for i in summary.line_items if i.kind == LineItemKind.ELECTRIC)
        water_line = next(i for i in summary.line_items if i.kind == LineItemKind.WATER)
        assert electric_line.estimated is True
        assert water_line.estimated is False

    def test_late_fee_applied_after_due_day(self) -> None:
        """Test paying on March 10 with rent due on the 5th incurs a late fee."""
        summary = calculate_bill(
            make_input(rent_due_day=5, pay_date=date(2024, 3, 10)),
            PER_DAY_POLICY,
        )

        assert summary.due_date == date(2024, 3, 5)
        assert summary.days_late == 5
        assert summary.late_fee == Decimal("500")
        assert summary.total == Decimal("4120")

    def test_no_late_fee_on_due_day(self) -> None:
        """Test paying on the due day itself incurs no fee."""
        summary = calculate_bill(
            make_input(rent_due_day=5, pay_date=date(2024, 3, 5)),
            PER_DAY_POLICY,
        )

        assert summary.days_late == 0
        assert summary.late_fee == Decimal("0")
        assert all(i.kind != LineItemKind.LATE_FEE for i in summary.line_items)

    def test_additional_charges_in_order(self) -> None:
        """Test charges and credits are summed and itemized in the order given."""
        charges = [
            AdditionalCharge(name="Cleaning", amount=Decimal("150")),
            AdditionalCharge(name="Discount", amount=Decimal("-50")),
        ]
        summary = calculate_bill(make_input(additional_charges=charges))

        assert summary.additional_total == Decimal("100")
        assert summary.total == Decimal("3720")
        assert [c.name for c in summary.additional_charges] == ["Cleaning", "Discount"]

        extra_lines = [i for i in summary.line_items if i.kind == LineItemKind.ADDITIONAL]
        assert [i.label for i in extra_lines] == ["Cleaning", "Discount"]
        assert [i.amount for i in extra_lines] == [Decimal("150"), Decimal("-50")]


class TestBillingProperties:
    """Invariants that hold for every bill."""

    def test_deterministic(self) -> None:
        """Test the same input always gives the same summary."""
        data = make_input(
            rent_due_day=3,
            pay_date=date(2024, 3, 20),
            additional_charges=[AdditionalCharge(name="Parking", amount=Decimal("99.99"))],
        )
        first = calculate_bill(data, PER_DAY_POLICY)
        second = calculate_bill(data, PER_DAY_POLICY)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_total_is_sum_of_components(self) -> None:
        """Test the total adds up exactly from the rounded components."""
        room = make_room(water_rate=Decimal("18.333"), electric_rate=Decimal("7.777"))
        data = make_input(
            room=room,
            previous=(date(2024, 3, 1), "100.125", "500.5"),
            current=(date(2024, 3, 30), "117.5", "563.25"),
            rent_due_day=1,
            pay_date=date(2024, 3, 4),
            additional_charges=[
                AdditionalCharge(name="Internet", amount=Decimal("33.333")),
                AdditionalCharge(name="Credit", amount=Decimal("-10.005")),
            ],
        )
        s = calculate_bill(data, PER_DAY_POLICY)

        assert s.total == (
            s.base_rent + s.water_charge + s.electric_charge + s.late_fee + s.additional_total
        )
        for amount in (s.base_rent, s.water_charge, s.electric_charge, s.late_fee, s.total):
            assert amount == amount.quantize(Decimal("0.01"))

    def test_utility_charges_never_negative(self) -> None:
        """Test decreasing counters never give a negative charge."""
        summary = calculate_bill(
            make_input(
                previous=(date(2024, 3, 1), "900", "9000"),
                current=(date(2024, 3, 30), "0", "0"),
            )
        )
        assert summary.water_charge == Decimal("0")
        assert summary.electric_charge == Decimal("0")
        assert summary.water_estimated is True
        assert summary.electric_estimated is True

    @pytest.mark.parametrize("days", [0, 1, 15, 29, 45])
    def test_monthly_rent_is_flat(self, days: int) -> None:
        """Test monthly rent ignores the period length."""
        start = date(2024, 1, 1)
        end = date.fromordinal(start.toordinal() + days)
        summary = calculate_bill(
            make_input(previous=(start, "0", "0"), current=(end, "0", "0"), pay_date=end)
        )
        assert summary.base_rent == Decimal("3000")

    def test_daily_rent_multiplies_days(self) -> None:
        """Test daily rent charges every day of the period."""
        summary = calculate_bill(
            make_input(
                previous=(date(2024, 3, 1), "100", "500"),
                current=(date(2024, 3, 8), "100", "500"),
                rental_type=RentalType.DAILY,
            )
        )
        assert summary.billed_days == 7
        assert summary.base_rent == Decimal("1050")

    def test_late_fee_boundary(self) -> None:
        """Test the first late day is the day after the due date."""
        on_time = calculate_bill(
            make_input(rent_due_day=5, pay_date=date(2024, 3, 5)), PER_DAY_POLICY
        )
        one_day_late = calculate_bill(
            make_input(rent_due_day=5, pay_date=date(2024, 3, 6)), PER_DAY_POLICY
        )
        assert on_time.late_fee == Decimal("0")
        assert one_day_late.late_fee == Decimal("100")

    def test_many_small_charges_do_not_drift(self) -> None:
        """Test summing many half-cent charges stays within one cent of the exact sum."""
        charges = [AdditionalCharge(name=f"Item {i}", amount=Decimal("0.005")) for i in range(1001)]
        summary = calculate_bill(make_input(additional_charges=charges))

        exact = Decimal("0.005") * 1001
        assert abs(summary.additional_total - exact) <= Decimal("0.01")
        assert summary.additional_total == Decimal("5.00")


class TestRounding:
    """Tests for rounding to minor units."""

    def test_bankers_rounding(self) -> None:
        """Test halves round to the even cent."""
        assert to_minor_units(Decimal("0.125")) == Decimal("0.12")
        assert to_minor_units(Decimal("0.135")) == Decimal("0.14")
        assert to_minor_units(Decimal("-0.125")) == Decimal("-0.12")

    def test_utility_charge_rounded_once(self) -> None:
        """Test fractional usage is charged exactly and rounded at the end."""
        room = make_room(water_rate=Decimal("0.125"))
        summary = calculate_bill(
            make_input(
                room=room,
                previous=(date(2024, 3, 1), "0", "0"),
                current=(date(2024, 3, 30), "1", "0"),
            )
        )
        assert summary.water_charge == Decimal("0.12")

    def test_line_items_add_up_to_total(self) -> None:
        """Test rounded additional charges still sum to the bill total."""
        charges = [AdditionalCharge(name=f"Item {i}", amount=Decimal("0.005")) for i in range(3)]
        summary = calculate_bill(make_input(additional_charges=charges))

        assert summary.total == Decimal("3620.02")
        assert sum(i.amount for i in summary.line_items) == summary.total
        extra = [i.amount for i in summary.line_items if i.kind == LineItemKind.ADDITIONAL]
        assert extra == [Decimal("0.01"), Decimal("0.01"), Decimal("0.00")]
        assert [c.amount for c in summary.additional_charges] == extra

    def test_line_amounts_are_whole_cents(self) -> None:
        """Test every itemized amount is expressed in cents."""
        charges = [
            AdditionalCharge(name="Laundry", amount=Decimal("10.333")),
            AdditionalCharge(name="Parking", amount=Decimal("20.333")),
            AdditionalCharge(name="Refund", amount=Decimal("-0.666")),
        ]
        summary = calculate_bill(make_input(additional_charges=charges))

        assert summary.additional_total == Decimal("30.00")
        for item in summary.line_items:
            assert item.amount == to_minor_units(item.amount)
        assert sum(i.amount for i in summary.line_items) == summary.total

    def test_allocate_minor_units(self) -> None:
        """Test leftover cents go to the lines rounded furthest away."""
        missing_cent = [Decimal("1.004"), Decimal("2.003"), Decimal("3.003")]
        assert allocate_minor_units(missing_cent, Decimal("6.01")) == [
            Decimal("1.01"),
            Decimal("2.00"),
            Decimal("3.00"),
        ]
        extra_cent = [Decimal("0.006"), Decimal("0.007")]
        assert allocate_minor_units(extra_cent, Decimal("0.01")) == [
            Decimal("0.00"),
            Decimal("0.01"),
        ]
        assert allocate_minor_units([], Decimal("0.00")) == []

    def test_large_amounts_are_exact(self) -> None:
        """Test amounts beyond the default decimal precision are billed exactly."""
        summary = calculate_bill(
            make_input(
                room=make_room(rate_monthly=Decimal("1e27")),
                current=(date(2024, 3, 30), "115", "1e26"),
            )
        )
        electric = (Decimal("1e26") - 500) * 8
        assert summary.base_rent == Decimal("1e27")
        assert summary.electric_charge == electric
        assert summary.total == Decimal("1e27") + 300 + electric


class TestComputeUsage:
    """Unit tests for meter usage between two readings."""

    def test_normal_increase(self) -> None:
        """Test a rising counter."""
        assert compute_usage(Decimal("100"), Decimal("115")) == (Decimal("15"), False)

    def test_unchanged_counter(self) -> None:
        """Test an unchanged counter has zero usage."""
        assert compute_usage(Decimal("100"), Decimal("100")) == (Decimal("0"), False)

    def test_reset_without_meter_max(self) -> None:
        """Test a reset counter counts from zero."""
        assert compute_usage(Decimal("9980"), Decimal("50")) == (Decimal("50"), True)

    def test_wrap_with_meter_max(self) -> None:
        """Test a wrapped counter with a known maximum."""
        usage, estimated = compute_usage(Decimal("9980"), Decimal("50"), Decimal("10000"))
        assert usage == Decimal("70")
        assert estimated is True

    def test_meter_max_from_policy(self) -> None:
        """Test the engine applies the configured meter maximum."""
        policy = BillingPolicy(electric_meter_max=Decimal("10000"))
        summary = calculate_bill(
            make_input(
                previous=(date(2024, 3, 1), "100", "9980"),
                current=(date(2024, 3, 30), "115", "50"),
            ),
            policy,
        )
        assert summary.electric_usage == Decimal("70")
        assert summary.electric_charge == Decimal("560")

    def test_rollover_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a rollover estimate is reported in the log."""
        with caplog.at_level(logging.WARNING, logger="app.services.billing"):
            calculate_bill(
                make_input(
                    previous=(date(2024, 3, 1), "100", "9980"),
                    current=(date(2024, 3, 30), "115", "50"),
                )
            )
        assert "Electric meter rollover" in caplog.text


class TestLateFeePolicy:
    """Tests for due dates and late fee modes."""

    def test_due_date_clamped_to_month_end(self) -> None:
        """Test day 31 falls on the last day of shorter months."""
        assert due_date_for(date(2024, 4, 15), 31) == date(2024, 4, 30)
        assert due_date_for(date(2024, 2, 10), 31) == date(2024, 2, 29)
        assert due_date_for(date(2023, 2, 10), 30) == date(2023, 2, 28)
        assert due_date_for(date(2024, 3, 1), 5) == date(2024, 3, 5)

    def test_flat_fee(self) -> None:
        """Test a flat fee does not grow with days late."""
        policy = BillingPolicy(late_fee_mode=LateFeeMode.FLAT, late_fee_amount=Decimal("250"))
        assert compute_late_fee(Decimal("3000"), 1, policy) == Decimal("250")
        assert compute_late_fee(Decimal("3000"), 20, policy) == Decimal("250")

    def test_percentage_fee(self) -> None:
        """Test a percentage fee is taken from the base rent."""
        policy = BillingPolicy(
            late_fee_mode=LateFeeMode.PERCENTAGE, late_fee_percent=Decimal("2.5")
        )
        assert compute_late_fee(Decimal("3000"), 3, policy) == Decimal("75")

    def test_no_fee_policy(self) -> None:
        """Test the default policy charges nothing."""
        summary = calculate_bill(make_input(rent_due_day=5, pay_date=date(2024, 3, 25)))
        assert summary.days_late == 20
        assert summary.late_fee == Decimal("0")

    def test_grace_days(self) -> None:
        """Test grace days postpone the first late day."""
        policy = BillingPolicy(
            late_fee_mode=LateFeeMode.PER_DAY, late_fee_amount=Decimal("100"), grace_days=3
        )
        within_grace = calculate_bill(
            make_input(rent_due_day=5, pay_date=date(2024, 3, 8)), policy
        )
        after_grace = calculate_bill(
            make_input(rent_due_day=5, pay_date=date(2024, 3, 10)), policy
        )
        assert within_grace.late_fee == Decimal("0")
        assert after_grace.late_fee == Decimal("200")

    def test_daily_rental_has_no_late_fee(self) -> None:
        """Test late fees apply to monthly rentals only."""
        summary = calculate_bill(
            make_input(
                rental_type=RentalType.DAILY, rent_due_day=1, pay_date=date(2024, 3, 30)
            ),
            PER_DAY_POLICY,
        )
        assert summary.due_date is None
        assert summary.late_fee == Decimal("0")

    def test_no_due_day_means_no_late_fee(self) -> None:
        """Test bills without a due day are never late."""
        summary = calculate_bill(make_input(pay_date=date(2024, 4, 30)), PER_DAY_POLICY)
        assert summary.due_date is None
        assert summary.late_fee == Decimal("0")

    def test_late_fee_line_item(self) -> None:
        """Test a late fee shows up as its own line."""
        summary = calculate_bill(
            make_input(rent_due_day=5, pay_date=date(2024, 3, 7)), PER_DAY_POLICY
        )
        late_line = next(i for i in summary.line_items if i.kind == LineItemKind.LATE_FEE)
        assert late_line.label == "Late fee (2 days)"
        assert late_line.quantity == Decimal("2")
        assert late_line.unit_price == Decimal("100")
        assert late_line.amount == Decimal("200")

    def test_late_fee_label_single_day(self) -> None:
        """Test one day late reads as a single day."""
        summary = calculate_bill(
            make_input(rent_due_day=5, pay_date=date(2024, 3, 6)), PER_DAY_POLICY
        )
        late_line = next(i for i in summary.line_items if i.kind == LineItemKind.LATE_FEE)
        assert late_line.label == "Late fee (1 day)"

    def test_flat_fee_label_has_no_day_count(self) -> None:
        """Test fees that do not grow per day are labelled without a day count."""
        policy = BillingPolicy(late_fee_mode=LateFeeMode.FLAT, late_fee_amount=Decimal("250"))
        summary = calculate_bill(make_input(rent_due_day=5, pay_date=date(2024, 3, 10)), policy)
        late_line = next(i for i in summary.line_items if i.kind == LineItemKind.LATE_FEE)
        assert late_line.label == "Late fee"
        assert late_line.quantity == Decimal("1")
        assert late_line.amount == Decimal("250")


class TestInvalidInput:
    """Tests for requests the engine rejects."""

    def test_negative_rate(self) -> None:
        """Test a negative room rate is rejected."""
        with pytest.raises(InvalidBillingInput, match="water_rate"):
            calculate_bill(make_input(room=make_room(water_rate=Decimal("-1"))))

    def test_current_before_previous(self) -> None:
        """Test a period running backwards is rejected."""
        with pytest.raises(InvalidBillingInput, match="before the previous"):
            calculate_bill(
                make_input(
                    previous=(date(2024, 3, 30), "100", "500"),
                    current=(date(2024, 3, 1), "115", "540"),
                )
            )

    def test_unknown_rental_type(self) -> None:
        """Test an unrecognized rental type is rejected."""
        data = make_input().model_copy(update={"rental_type": "weekly"})
        with pytest.raises(InvalidBillingInput, match="Unknown rental type"):
            calculate_bill(data)

    def test_readings_from_other_room(self) -> None:
        """Test readings must belong to the billed room."""
        other = MeterSnapshot(
            room_id=2, reading_date=date(2024, 3, 30), water=Decimal("1"), electric=Decimal("1")
        )
        with pytest.raises(InvalidBillingInput, match="different rooms"):
            calculate_bill(make_input().model_copy(update={"current": other}))

    def test_rent_due_day_out_of_range(self) -> None:
        """Test due days outside 1-31 are rejected."""
        with pytest.raises(InvalidBillingInput, match="between 1 and 31"):
            calculate_bill(make_input(rent_due_day=32))

    def test_negative_meter_reading(self) -> None:
        """Test negative counters are rejected."""
        with pytest.raises(InvalidBillingInput, match="non-negative"):
            calculate_bill(
                make_input(previous=(date(2024, 3, 1), "-5", "500")),
            )

    def test_amount_out_of_range(self) -> None:
        """Test amounts too large to bill in cents are rejected."""
        with pytest.raises(InvalidBillingInput, match="out of range"):
            calculate_bill(make_input(current=(date(2024, 3, 30), "115", "1e80")))
        with pytest.raises(InvalidBillingInput, match="out of range"):
            calculate_bill(make_input(room=make_room(rate_monthly=Decimal("1e90"))))
