from datetime import datetime, timedelta
from unittest import mock

import pytest

from queqiao.constant import (
    Clock,
    bytes_to_int,
    bytes_to_ll,
    cal_perm,
    get_abs,
    get_date_time,
    get_fixpoint,
    get_int,
    get_ll,
    get_next,
    get_sign,
    int_to_bytes,
    ll_to_bytes,
    mod_sqrt,
    random_long,
)


def test_int_to_bytes_little_endian():
    assert int_to_bytes(1) == b"\x01\x00\x00\x00"


def test_int_to_bytes_truncates():
    assert int_to_bytes(2**32 + 5) == int_to_bytes(5)


@pytest.mark.parametrize("value", [0, 1, -1, 123456, -(2**31), 2**31 - 1])
def test_int_round_trip(value):
    assert bytes_to_int(int_to_bytes(value)) == value


def test_bytes_to_int_signed():
    assert bytes_to_int(b"\xff\xff\xff\xff") == -1


def test_bytes_to_int_reads_first_four():
    assert bytes_to_int(int_to_bytes(77) + b"\x09") == 77


def test_bytes_to_int_too_short():
    with pytest.raises(ValueError):
        bytes_to_int(b"\x01\x02")


def test_ll_to_bytes_little_endian():
    assert ll_to_bytes(1) == b"\x01" + bytes(7)


@pytest.mark.parametrize("value", [0, -1, 2**40 + 3, -(2**63), 2**63 - 1])
def test_ll_round_trip(value):
    assert bytes_to_ll(ll_to_bytes(value)) == value


def test_bytes_to_ll_signed():
    assert bytes_to_ll(b"\xff" * 8) == -1


def test_bytes_to_ll_too_short():
    with pytest.raises(ValueError):
        bytes_to_ll(b"\x00" * 7)


def test_get_next_worked_example():
    assert get_next("123, 34", 0) == 3


def test_get_next_skips_decimal_point():
    text = "1.5"
    assert get_next(text, 0) == len(text)


def test_get_int_skips_empty_fields():
    text = "3,,,,,4"
    value, pos = get_int(text, 1)
    assert value == 4
    assert pos == len(text)


def test_get_int_negative():
    value, pos = get_int("abc-42x", 0)
    assert value == -42
    assert pos == len("abc-42")


def test_get_ll_large():
    value, _ = get_ll("12345678901234", 0)
    assert value == 12345678901234


def test_get_int_without_number():
    with pytest.raises(ValueError):
        get_int("abc", 0)


def test_get_fixpoint_fraction():
    value, pos = get_fixpoint("1.25", 0, 100)
    assert value == 125
    assert pos == len("1.25")


def test_get_fixpoint_negative_integer():
    value, _ = get_fixpoint("-7", 0, 1)
    assert value == -7


def test_random_long_range():
    for _ in range(50):
        assert 0 <= random_long(13) < 13


def test_get_sign():
    assert get_sign(7 - 1, 7) == -1
    assert get_sign(2, 7) == 2


def test_get_abs():
    assert get_abs(-5) == 5
    assert get_abs(5) == 5


@pytest.mark.parametrize("a", [1, 2, 4])
def test_mod_sqrt_of_quadratic_residues(a):
    root = mod_sqrt(a, 7)
    assert (root * root) % 7 == a


def test_cal_perm_degree_zero():
    assert cal_perm([5, 9], 0, 0, 2, 1000) == 1


def test_cal_perm_single_other_key():
    assert cal_perm([5, 9], 1, 0, 2, 1000) == 9


def test_cal_perm_reduced():
    result = cal_perm([50, 90, 30], 2, 5, 3, 11)
    assert 0 <= result < 11


def test_cal_perm_too_few_keys():
    with pytest.raises(ValueError):
        cal_perm([1], 1, 0, 3, 7)


def test_clock_accumulates_total():
    before = Clock.total(5)
    with mock.patch("time.time_ns", side_effect=[1_000_000_000, 3_500_000_000]):
        with Clock(5):
            pass
    assert Clock.total(5) - before == pytest.approx(2.5)


def test_clock_elapsed():
    with mock.patch("time.time_ns", side_effect=[0, 2_000_000]):
        clock = Clock(1)
        assert clock.elapsed() == pytest.approx(0.002)


def test_clock_report(capsys):
    with mock.patch("time.time_ns", side_effect=[0, 1_000_000_000]):
        Clock(2).report()
    assert capsys.readouterr().out == "duration: 1.000000\n"


@pytest.mark.parametrize("clock_id", [-1, 101])
def test_clock_invalid_id(clock_id):
    with pytest.raises(IndexError):
        Clock(clock_id)
    with pytest.raises(IndexError):
        Clock.total(clock_id)


def test_get_date_time_format():
    fmt = "%Y-%m-%d_%H-%M-%S"
    stamp = get_date_time()
    parsed = datetime.strptime(stamp, fmt)
    assert parsed.strftime(fmt) == stamp
    assert abs(datetime.now() - parsed) < timedelta(minutes=1)