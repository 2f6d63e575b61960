"""Tests for perch.config — RuntimeConfig frozen dataclass."""

from pathlib import Path

import pytest

from perch.config import RuntimeConfig


class TestRuntimeConfig:
    def test_defaults(self) -> None:
        cfg = RuntimeConfig()

        assert cfg.poll_interval == 1.0
        assert cfg.id_prefix == "m"
        assert cfg.template_dir is None
        assert cfg.autoescape is True
        assert cfg.default_tag == "div"

    def test_override(self) -> None:
        cfg = RuntimeConfig(poll_interval=0.1, id_prefix="c", default_tag="section")

        assert cfg.poll_interval == 0.1
        assert cfg.id_prefix == "c"
        assert cfg.default_tag == "section"

    def test_frozen(self) -> None:
        cfg = RuntimeConfig()

        with pytest.raises(AttributeError):
            cfg.poll_interval = 5.0  # type: ignore[misc]

    def test_template_dir_as_path(self) -> None:
        cfg = RuntimeConfig(template_dir=Path("views"))
        assert cfg.template_dir == Path("views")
