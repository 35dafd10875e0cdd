import pytest
from pydantic import ValidationError

from shelfwise.core.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.min_library_size == 3
    assert settings.fallback_result_count == 10
    assert settings.llm_primary_model == "gemini-2.0-flash-exp"


@pytest.mark.parametrize("size", [0, -2])
def test_library_size_gate_must_be_positive(size):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, min_library_size=size)


def test_library_size_gate_from_environment(monkeypatch):
    monkeypatch.setenv("MIN_LIBRARY_SIZE", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
