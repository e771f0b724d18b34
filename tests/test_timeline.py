import pytest

from steps import StepRecorder
from timeline import TimelinePlayer


def make_steps(n=3):
    rec = StepRecorder()
    for i in range(n):
        rec.record(i, message=f"step {i}")
    return rec.steps


def test_autoplay_advances_on_cadence_and_stops_at_end():
    player = TimelinePlayer()
    player.load(make_steps(), autoplay=True)
    assert player.is_playing
    player.update(999)
    assert player.index == 0
    player.update(1)
    assert player.index == 1
    player.update(1000)
    assert player.index == 2
    assert not player.is_playing


def test_speed_multiplier():
    player = TimelinePlayer(make_steps(5), speed=4.0)
    player.play()
    player.update(500)
    assert player.index == 2


def test_play_at_end_restarts():
    player = TimelinePlayer(make_steps())
    player.seek_end()
    player.play()
    assert player.index == 0
    assert player.is_playing


def test_seek_while_playing_pauses_and_clamps():
    player = TimelinePlayer(make_steps())
    player.play()
    player.seek(10)
    assert not player.is_playing
    assert player.index == 2
    player.seek(-4)
    assert player.index == 0


def test_step_forward_and_backward_stop_at_edges():
    player = TimelinePlayer(make_steps(2))
    player.step_backward()
    assert player.index == 0
    player.step_forward()
    player.step_forward()
    assert player.index == 1
    assert player.at_end


def test_toggle_play():
    player = TimelinePlayer(make_steps())
    player.toggle_play()
    assert player.is_playing
    player.toggle_play()
    assert not player.is_playing


def test_load_replaces_and_stops():
    player = TimelinePlayer(make_steps())
    player.play()
    player.update(1000)
    player.load(make_steps(2))
    assert player.index == 0
    assert player.total_steps == 2
    assert not player.is_playing


def test_empty_player_ignores_transport():
    player = TimelinePlayer()
    player.play()
    player.seek(3)
    assert not player.is_playing
    assert player.current_step is None


def test_on_step_callback():
    seen = []
    player = TimelinePlayer(on_step=lambda s: seen.append(s.state))
    player.load(make_steps())
    player.step_forward()
    assert seen == [0, 1]


def test_speed_must_be_positive():
    with pytest.raises(ValueError):
        TimelinePlayer().set_speed(0)


@pytest.mark.parametrize("n", [5, 8])
def test_step_forward_visits_every_index_once(n):
    seen = []
    player = TimelinePlayer(on_step=lambda step: seen.append(step.state))
    player.load(make_steps(n))
    for _ in range(n - 1):
        player.step_forward()
    assert seen == list(range(n))
    assert player.at_end
    player.step_forward()
    assert seen == list(range(n))
