import pytest

from stallsync.payroll.calculator.standard_calculator import StandardPayrollCalculator


@pytest.mark.parametrize("salary", [0, 1, 30000, 123456.78])
def test_zero_working_days_earns_nothing(salary):
    calc = StandardPayrollCalculator()
    assert calc.earned_salary(salary, 0, 12) == 0
    assert calc.per_day_rate(salary, 0) == 0


def test_full_attendance_earns_full_salary():
    assert StandardPayrollCalculator().earned_salary(30000, 30, 30) == pytest.approx(30000)


def test_pro_rata_by_present_days():
    calc = StandardPayrollCalculator()
    assert calc.per_day_rate(31000, 31) == pytest.approx(1000)
    assert calc.earned_salary(31000, 31, 28.5) == pytest.approx(28500)
