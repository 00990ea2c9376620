import json

import pytest

from queqiao import config
from queqiao.config import Config, get_residual, inverse, power
from queqiao.reader import JsonParseError
from queqiao.value import Value


@pytest.fixture(autouse=True)
def _clean_active():
    config.reset()
    yield
    config.reset()


def _settings(**overrides):
    base = {
        "B": 32,
        "D": 8,
        "L": 1,
        "IE": 8192,
        "M": 2,
        "MOD": "7",
        "DECIMAL_PLACES": 0,
        "IP": ["127.0.0.1", "127.0.0.2"],
        "PORT": [5000, 5001],
        "LEARNING_RATE": 0.5,
        "TRAIN_FILENAME": "train.csv",
        "TEST_FILENAME": "test.csv",
    }
    base.update(overrides)
    return base


def _config(**overrides):
    return Config.from_value(Value.from_python(_settings(**overrides)))


def _write(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_members_are_read():
    cfg = _config()
    assert cfg.B == 32
    assert cfg.IE == 8192
    assert cfg.MOD == 7
    assert cfg.LEARNING_RATE == 0.5
    assert cfg.TRAIN_FILENAME == "train.csv"
    assert cfg.TEST_FILENAME == "test.csv"
    assert cfg.IP == ("127.0.0.1", "127.0.0.2")
    assert cfg.PORT == (5000, 5001)


def test_derived_values():
    cfg = _config()
    assert cfg.D2 == cfg.D
    assert 2 * cfg.LEAKEY_RELU_BIAS == cfg.IE
    assert (2 * cfg.INV2) % cfg.MOD == 1
    assert cfg.SQRTINV == 4
    assert cfg.INV2_M == 2


def test_missing_members_read_as_zero_or_empty():
    cfg = _config()
    assert cfg.THREAD_NUM == 0
    assert cfg.FILENAME == ""


def test_only_first_m_addresses_are_used():
    cfg = _config(M=1)
    assert cfg.IP == ("127.0.0.1",)
    assert cfg.PORT == (5000,)


def test_mod_reads_leading_integer():
    assert _config(MOD="7abc").MOD == 7


def test_mod_must_be_string():
    with pytest.raises(TypeError):
        _config(MOD=7)


def test_zero_l_fails():
    with pytest.raises(ZeroDivisionError):
        _config(L=0)


def test_load_from_file(tmp_path):
    path = _write(tmp_path, "cfg.json", _settings())
    assert Config.load(path) == _config()


def test_load_invalid_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{ \"B\" : }", encoding="utf-8")
    with pytest.raises(JsonParseError):
        Config.load(path)


def test_init_keeps_first_configuration(tmp_path):
    first = _write(tmp_path, "a.json", _settings(B=1))
    second = _write(tmp_path, "b.json", _settings(B=2))
    cfg = config.init(first)
    assert cfg.B == 1
    assert config.init(second) is cfg
    assert config.current() is cfg


def test_current_requires_init():
    with pytest.raises(RuntimeError):
        config.current()


def test_reset_forgets(tmp_path):
    config.init(_write(tmp_path, "a.json", _settings()))
    config.reset()
    with pytest.raises(RuntimeError):
        config.current()


@pytest.mark.parametrize("value", [-100, -3, 0, 5, 123456])
@pytest.mark.parametrize("mod", [7, 13, 1000003])
def test_residual_range_and_congruence(value, mod):
    residual = get_residual(value, mod)
    assert 0 <= residual < mod
    assert (residual - value) % mod == 0


@pytest.mark.parametrize("a", [1, 2, 3, 5, 6])
def test_inverse_is_multiplicative_inverse(a):
    assert (a * inverse(a, 7, 7)) % 7 == 1


@pytest.mark.parametrize("a,b", [(3, 4), (2, 5), (10, 3)])
def test_power_agrees_with_builtin(a, b):
    assert power(a, b, 13) == pow(a, b, 13)


def test_power_zero_exponent():
    assert power(5, 0, 7) == 1


def test_power_exponent_reduced_by_mod():
    assert power(3, 7, 7) == 1


def test_power_negative_base():
    assert power(-2, 3, 11) == get_residual(-8, 11)