import pytest
from pydantic import ValidationError

from shared.settings import EngineSettings


class TestEngineSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("WAGER_PRESS_TRIGGER_MARGIN", raising=False)
        settings = EngineSettings()

        assert settings.press_trigger_margin == 2
        assert settings.log_dir is None

    def test_reads_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("WAGER_PRESS_TRIGGER_MARGIN", "3")
        monkeypatch.setenv("WAGER_LOG_DIR", "logs/wager")
        settings = EngineSettings()

        assert settings.press_trigger_margin == 3
        assert settings.log_dir == "logs/wager"

    def test_margin_must_be_positive(self):
        with pytest.raises(ValidationError):
            EngineSettings(press_trigger_margin=0)
