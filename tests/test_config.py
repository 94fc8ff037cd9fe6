from __future__ import annotations

import pytest

from pdfinspectx.config import DEFAULT_CONFIG, InspectorConfig


def test_defaults():
    assert DEFAULT_CONFIG.window_step == 1000
    assert DEFAULT_CONFIG.header_probe == 1024
    assert DEFAULT_CONFIG.offset_tolerance == 1000
    assert DEFAULT_CONFIG.max_bytes == 0
    assert DEFAULT_CONFIG.hex_startxref is True


def test_from_env_reads_prefixed_variables():
    config = InspectorConfig.from_env(
        {
            "PDFINSPECTX_WINDOW_STEP": "250",
            "PDFINSPECTX_MAX_OBJECTS": " 12 ",
            "PDFINSPECTX_HEX_STARTXREF": "off",
            "PDFINSPECTX_CHECK_STREAM_LENGTH": "yes",
            "UNRELATED": "1",
        }
    )
    assert config.window_step == 250
    assert config.max_objects == 12
    assert config.hex_startxref is False
    assert config.check_stream_length is True
    assert config.max_depth == DEFAULT_CONFIG.max_depth


def test_from_env_uses_process_environment(monkeypatch):
    monkeypatch.setenv("PDFINSPECTX_MAX_BYTES", "2048")
    assert InspectorConfig.from_env().max_bytes == 2048


def test_from_env_rejects_non_integers():
    with pytest.raises(ValueError, match="PDFINSPECTX_MAX_DEPTH"):
        InspectorConfig.from_env({"PDFINSPECTX_MAX_DEPTH": "deep"})


def test_with_overrides_ignores_none():
    config = DEFAULT_CONFIG.with_overrides(max_bytes=None, max_objects=5)
    assert config.max_bytes == 0
    assert config.max_objects == 5
    assert DEFAULT_CONFIG.max_objects == 0


@pytest.mark.parametrize(
    "kwargs",
    [{"window_step": 0}, {"header_probe": -1}, {"max_depth": 0}, {"max_bytes": -5}],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValueError):
        InspectorConfig(**kwargs)
