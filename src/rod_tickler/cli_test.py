import json

import pytest
import structlog
from click.testing import CliRunner
from rod_tickler import cli as cli_module
from rod_tickler.cli import cli, handle_key, read_keys
from rod_tickler.models.problem import Problem
from rod_tickler.playback import AutoPlayer, PlaybackCursor, StepFeed
from rod_tickler.solver import solve


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.text = json.dumps(payload)

    def json(self):
        return self._payload


@pytest.fixture
def runner():
    yield CliRunner()
    structlog.reset_defaults()


class TestSolve:
    """Test suite for the solve command and shared problem options"""

    def test_default_preset(self, runner):
        result = runner.invoke(cli, ["solve"])
        assert result.exit_code == 0, result.output
        assert "Pieces: 2 + 6" in result.output
        assert "Max profit: $22" in result.output
        assert "Comparisons: 36" in result.output

    def test_inline_prices(self, runner):
        result = runner.invoke(cli, ["solve", "-p", "1,5,8,9"])
        assert result.exit_code == 0, result.output
        assert "Pieces: 2 + 2" in result.output
        assert "Steps: 18" in result.output

    def test_preset_with_shorter_length(self, runner):
        result = runner.invoke(cli, ["solve", "-P", "classic", "-n", "4", "--fit"])
        assert result.exit_code == 0, result.output
        assert "Max profit: $10" in result.output

    def test_count_mismatch(self, runner):
        result = runner.invoke(cli, ["solve", "-p", "1,5", "-n", "4"])
        assert result.exit_code == 1
        assert "Expected 4 prices, got 2" in result.output

    def test_fit_pads(self, runner):
        result = runner.invoke(cli, ["solve", "-p", "1,5", "-n", "4", "--fit"])
        assert result.exit_code == 0, result.output
        assert "Max profit: $10" in result.output

    def test_bad_price(self, runner):
        result = runner.invoke(cli, ["solve", "-p", "1,x"])
        assert result.exit_code == 1
        assert "not a whole number" in result.output

    def test_length_out_of_range(self, runner):
        result = runner.invoke(cli, ["solve", "-n", "16"])
        assert result.exit_code == 2

    def test_both_price_sources(self, runner, tmp_path):
        path = tmp_path / "prices.csv"
        path.write_text("1,5")
        result = runner.invoke(cli, ["solve", "-p", "1,5", "-f", str(path)])
        assert result.exit_code == 2
        assert "not both" in result.output

    def test_prices_file(self, runner, tmp_path):
        path = tmp_path / "prices.json"
        path.write_text(json.dumps({"prices": [1, 5, 8, 9]}))
        result = runner.invoke(cli, ["solve", "-f", str(path), "--format", "json"])
        assert result.exit_code == 0, result.output
        assert "Max profit: $10" in result.output

    def test_debug_logging(self, runner):
        result = runner.invoke(cli, ["--log-level", "debug", "solve", "-p", "1,5"])
        assert result.exit_code == 0, result.output


class TestSteps:
    def test_lists_every_phase(self, runner):
        result = runner.invoke(cli, ["steps", "-p", "1,5"])
        assert result.exit_code == 0, result.output
        for phase in ("init", "comparing", "filled", "traceback", "complete"):
            assert phase in result.output


class TestShow:
    def test_show_step(self, runner):
        result = runner.invoke(cli, ["show", "-p", "1,5,8,9", "--step", "0"])
        assert result.exit_code == 0, result.output
        assert "Step 0 / 17" in result.output

    def test_out_of_range(self, runner):
        result = runner.invoke(cli, ["show", "-p", "1,5", "--step", "99"])
        assert result.exit_code == 2
        assert "out of range" in result.output


class TestPresets:
    def test_lists_presets(self, runner):
        result = runner.invoke(cli, ["presets"])
        assert result.exit_code == 0, result.output
        assert "classic" in result.output
        assert "challenge" in result.output


class TestFetch:
    """Test suite for fetching presets from the demo API"""

    def test_fetch_without_playback(self, runner, monkeypatch):
        calls = []

        def fake_get(url, timeout):
            calls.append(url)
            return FakeResponse(200, {"id": "x", "label": "X", "rod_length": 4,
                                      "prices": [1, 5, 8, 9], "description": ""})

        monkeypatch.setattr(cli_module.requests, "get", fake_get)
        result = runner.invoke(cli, ["fetch", "-P", "x", "--endpoint", "http://api.test", "--no-play"])
        assert result.exit_code == 0, result.output
        assert calls == ["http://api.test/api/presets/x"]
        assert "Max profit: $10" in result.output

    def test_fetch_not_found(self, runner, monkeypatch):
        monkeypatch.setattr(
            cli_module.requests, "get",
            lambda url, timeout: FakeResponse(404, {"detail": "Unknown preset: x"}),
        )
        result = runner.invoke(cli, ["fetch", "-P", "x", "--no-play"])
        assert result.exit_code == 1
        assert "Failed to get preset" in result.output

    def test_fetch_invalid_problem(self, runner, monkeypatch):
        monkeypatch.setattr(
            cli_module.requests, "get",
            lambda url, timeout: FakeResponse(200, {"rod_length": 3, "prices": [1]}),
        )
        result = runner.invoke(cli, ["fetch", "--no-play"])
        assert result.exit_code == 1
        assert "invalid problem" in result.output


class IdleTimer:
    """Timer that never fires, so only key presses move the player."""

    def __init__(self, interval, function, args=None):
        self.daemon = False

    def start(self):
        pass

    def cancel(self):
        pass


@pytest.fixture
def auto():
    player = AutoPlayer(PlaybackCursor(), lambda step: None, speed=5, timer_factory=IdleTimer)
    player.load(solve(Problem(2, (1, 5))))
    return player


class TestKeys:
    """Test suite for keyboard control of playback"""

    def test_stepping(self, auto):
        assert handle_key(auto, "n")
        assert handle_key(auto, "\x1b[C")
        assert auto.cursor.index == 2
        assert handle_key(auto, "p")
        assert auto.cursor.index == 1
        handle_key(auto, "$")
        assert auto.cursor.index == auto.cursor.sequence.last_index
        handle_key(auto, "0")
        assert auto.cursor.index == 0

    def test_play_pause_and_speed(self, auto):
        handle_key(auto, " ")
        assert auto.is_playing
        handle_key(auto, " ")
        assert not auto.is_playing
        handle_key(auto, "+")
        assert auto.speed == 6
        for _ in range(10):
            handle_key(auto, "-")
        assert auto.speed == 1

    def test_restart(self, auto):
        auto.jump_to(4)
        handle_key(auto, "r")
        assert auto.cursor.index == 0
        assert auto.is_playing

    def test_unknown_key_is_ignored(self, auto):
        assert handle_key(auto, "x")
        assert auto.cursor.index == 0

    def test_quit(self, auto):
        auto.play()
        assert handle_key(auto, "q") is False
        assert not auto.is_playing

    def test_read_keys_until_quit(self, auto, monkeypatch):
        keys = iter(["n", "n", "q", "n"])
        monkeypatch.setattr(cli_module.click, "getchar", lambda: next(keys))
        feed = StepFeed()
        read_keys(auto, feed)
        assert feed.closed
        assert auto.cursor.index == 2

    def test_read_keys_ctrl_c(self, auto, monkeypatch):
        def interrupt():
            raise KeyboardInterrupt

        monkeypatch.setattr(cli_module.click, "getchar", interrupt)
        feed = StepFeed()
        auto.play()
        read_keys(auto, feed)
        assert feed.closed
        assert not auto.is_playing


class TestPlay:
    def test_plays_to_the_end(self, runner):
        result = runner.invoke(cli, ["play", "-p", "1,5", "--speed", "10"])
        assert result.exit_code == 0, result.output
        assert "Max profit: $5" in result.output

    def test_interactive_quit(self, runner, monkeypatch):
        monkeypatch.setattr(cli_module.click, "getchar", lambda: "q")
        result = runner.invoke(cli, ["play", "-p", "1,5", "-i"])
        assert result.exit_code == 0, result.output
        assert "space play/pause" in result.output
        assert "Max profit: $5" in result.output
