from datetime import datetime

from timeclock.timeentries.calculator.standard_calculator import StandardHoursCalculator


def test_standard_calculator_subtracts_unpaid_break():
    calc = StandardHoursCalculator()
    hours = calc.total_hours(datetime(2026, 1, 5, 8, 0), datetime(2026, 1, 5, 17, 0), 60)
    assert hours == 8.0


def test_standard_calculator_rounds_to_two_decimals():
    calc = StandardHoursCalculator()
    hours = calc.total_hours(datetime(2026, 1, 5, 8, 0), datetime(2026, 1, 5, 12, 10), 0)
    assert hours == 4.17


def test_standard_calculator_never_negative():
    calc = StandardHoursCalculator()
    hours = calc.total_hours(datetime(2026, 1, 5, 8, 0), datetime(2026, 1, 5, 8, 20), 45)
    assert hours == 0.0
