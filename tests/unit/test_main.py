"""Unit tests for the command line entry point."""

import argparse
import sys

import pytest

from micscope.main import build_config, main


def make_args(**overrides):
    values = dict(config=None, profile=None, frame_size=None, device=None)
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.mark.unit
class TestCommandLine:
    """Test cases for command line handling."""

    def test_build_config_defaults(self):
        config = build_config(make_args())

        assert config.get('analyzer.profile') is None
        assert config.get('audio.device_index') is None

    def test_build_config_overrides(self, test_config):
        config = build_config(make_args(
            config=str(test_config.config_file), profile="bars", frame_size=2048, device=0))

        assert config.get('analyzer.profile') == "bars"
        assert config.get('analyzer.frame_size') == 2048
        assert config.get('audio.device_index') == 0
        assert config.get('publisher.topic') == "test_service.frame"

    def test_list_devices(self, mock_pyaudio, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["micscope", "--list-devices"])

        main()

        out = capsys.readouterr().out
        assert "[0] Mock Device 0 - 1 ch, 48000Hz" in out
        assert "Mock Device 3" not in out

    def test_version(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["micscope", "--version"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        assert "micscope v" in capsys.readouterr().out

    def test_bad_frame_size_exits_with_configuration_error(self, tmp_path, monkeypatch, capsys):
        config_file = tmp_path / "micscope.yaml"
        config_file.write_text("logging:\n  file_path: test.log\n  console_output: false\n")
        monkeypatch.setattr(sys, "argv", [
            "micscope", "--config", str(config_file), "--frame-size", "1000", "--no-ui"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 2
        assert "Configuration error" in capsys.readouterr().out
