import dataclasses

import pytest

from querybuild import DEFAULT_CONFIG, CompilerConfig


def test_defaults():
    assert DEFAULT_CONFIG.strict_scopes is True
    assert DEFAULT_CONFIG.value_separator == ","
    assert DEFAULT_CONFIG.max_page_size is None


def test_config_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.strict_scopes = False


def test_with_overrides_returns_copy():
    lenient = DEFAULT_CONFIG.with_overrides(strict_scopes=False, max_page_size=100)

    assert lenient.strict_scopes is False
    assert lenient.max_page_size == 100
    assert DEFAULT_CONFIG.strict_scopes is True


@pytest.mark.parametrize(
    "kwargs",
    [{"value_separator": ""}, {"max_page_size": 0}, {"max_page_size": -5}],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValueError):
        CompilerConfig(**kwargs)
