"""Tests for the playback state machine, driven by a virtual clock."""

from dataclasses import replace

import pytest

from config import DEFAULT_SETTINGS
from engine import PlaybackController, PlaybackState, Status, TRANSITIONS, VirtualScheduler
from search import Direction, build_trace
from sequence import generate, pick_loop_target

SEQ = (2, 5, 9, 14, 20)


def _make(sequence=SEQ, target=14, **overrides):
    settings = replace(DEFAULT_SETTINGS, **overrides)
    sched = VirtualScheduler()
    ctrl = PlaybackController(settings, sched, target=target, sequence=sequence)
    return ctrl, sched


class TestInitialState:
    def test_starts_idle(self):
        ctrl, _ = _make()
        assert ctrl.state == PlaybackState(Status.IDLE, -1, False, False)
        assert ctrl.current_step is None

    def test_default_target_is_middle_element(self):
        ctrl = PlaybackController(DEFAULT_SETTINGS, VirtualScheduler())
        assert ctrl.target == ctrl.sequence[len(ctrl.sequence) // 2]
        assert len(ctrl.sequence) == DEFAULT_SETTINGS.array_size

    def test_trace_matches_builder(self):
        ctrl, _ = _make(target=99)
        assert ctrl.trace == build_trace(SEQ, 99, "iterative")


class TestStart:
    def test_manual_start(self):
        ctrl, sched = _make(auto_play=False)
        assert ctrl.start()
        assert ctrl.state == PlaybackState(Status.SEARCHING, 0, False, False)
        assert sched.pending == 0

    def test_empty_trace_goes_straight_to_not_found(self):
        ctrl, sched = _make(sequence=(), target=3)
        assert ctrl.trace == ()
        assert not ctrl.start()
        assert ctrl.status is Status.NOT_FOUND
        assert ctrl.current_step_index == -1
        assert sched.pending == 0

    def test_single_element_hit_is_found_immediately(self):
        ctrl, _ = _make(sequence=(7,), target=7)
        ctrl.start()
        assert ctrl.status is Status.FOUND
        assert ctrl.is_playing is False
        assert len(ctrl.trace) == 1


class TestAutoAdvance:
    def test_advances_exactly_at_step_delay(self):
        ctrl, sched = _make(target=99, step_delay=650)
        ctrl.start()
        assert ctrl.is_playing
        sched.advance(649)
        assert ctrl.current_step_index == 0
        sched.advance(1)
        assert ctrl.current_step_index == 1

    def test_plays_to_not_found_then_stops(self):
        ctrl, sched = _make(target=99, step_delay=650)
        ctrl.start()
        sched.advance(650 * 3)
        assert ctrl.current_step_index == 3
        assert ctrl.status is Status.NOT_FOUND
        assert ctrl.is_playing is False
        assert ctrl.current_step.direction is Direction.MISS
        assert sched.pending == 0

    def test_plays_to_found(self):
        ctrl, sched = _make(target=14, step_delay=300)
        ctrl.start()
        sched.advance(300)
        assert ctrl.status is Status.FOUND
        assert ctrl.is_playing is False
        sched.advance(10_000)
        assert ctrl.current_step_index == 1

    def test_one_step_per_tick(self):
        seq = generate(36, 0, 1000, 11)
        ctrl, sched = _make(sequence=seq, target=-1, step_delay=200)
        ctrl.start()
        seen = [ctrl.current_step_index]
        for _ in range(len(ctrl.trace) - 1):
            sched.advance(200)
            seen.append(ctrl.current_step_index)
        assert seen == list(range(len(ctrl.trace)))

    def test_pause_stops_timer(self):
        ctrl, sched = _make(target=99, step_delay=650)
        ctrl.start()
        assert ctrl.toggle_play()
        assert not ctrl.is_playing
        sched.advance(5000)
        assert ctrl.current_step_index == 0
        ctrl.toggle_play()
        sched.advance(650)
        assert ctrl.current_step_index == 1

    def test_manual_step_restarts_delay(self):
        ctrl, sched = _make(target=99, step_delay=650)
        ctrl.start()
        sched.advance(400)
        ctrl.step_forward()
        sched.advance(400)
        assert ctrl.current_step_index == 1
        sched.advance(250)
        assert ctrl.current_step_index == 2


class TestNavigation:
    def test_step_forward_stops_at_last(self):
        ctrl, _ = _make(target=14, auto_play=False)
        ctrl.start()
        assert ctrl.step_forward()
        assert ctrl.status is Status.FOUND
        assert not ctrl.step_forward()
        assert ctrl.current_step_index == 1

    def test_step_backward_stops_at_zero(self):
        ctrl, _ = _make(auto_play=False)
        ctrl.start()
        assert not ctrl.step_backward()
        assert ctrl.current_step_index == 0

    def test_step_backward_from_found_resumes_searching(self):
        ctrl, _ = _make(target=14, auto_play=False)
        ctrl.start()
        ctrl.step_forward()
        assert ctrl.step_backward()
        assert ctrl.status is Status.SEARCHING
        assert ctrl.current_step_index == 0

    def test_step_backward_from_found_replays_with_autoplay(self):
        ctrl, sched = _make(target=14, step_delay=650)
        ctrl.start()
        sched.advance(650)
        assert ctrl.status is Status.FOUND
        assert ctrl.step_backward()
        assert ctrl.state == PlaybackState(Status.SEARCHING, 0, True, False)
        sched.advance(650)
        assert ctrl.status is Status.FOUND
        assert ctrl.current_step_index == 1

    def test_step_forward_from_idle_plays_with_autoplay(self):
        ctrl, sched = _make(target=99, step_delay=650)
        assert ctrl.step_forward()
        assert ctrl.is_playing
        sched.advance(650)
        assert ctrl.current_step_index == 1

    def test_moving_within_searching_keeps_pause(self):
        ctrl, sched = _make(target=99, step_delay=650)
        ctrl.start()
        ctrl.toggle_play()
        ctrl.step_forward()
        assert ctrl.status is Status.SEARCHING
        assert not ctrl.is_playing
        sched.advance(5000)
        assert ctrl.current_step_index == 1

    def test_step_forward_from_idle_selects_first_step(self):
        ctrl, _ = _make(auto_play=False)
        assert ctrl.step_forward()
        assert ctrl.current_step_index == 0
        assert ctrl.status is Status.SEARCHING

    def test_goto_step_scrubs(self):
        ctrl, _ = _make(target=99, auto_play=False)
        assert ctrl.goto_step(3)
        assert ctrl.status is Status.NOT_FOUND
        assert ctrl.goto_step(1)
        assert ctrl.status is Status.SEARCHING
        assert not ctrl.goto_step(4)
        assert not ctrl.goto_step(-1)
        assert ctrl.current_step_index == 1

    def test_next_step_peek(self):
        ctrl, _ = _make(target=99, auto_play=False)
        ctrl.start()
        assert ctrl.next_step == ctrl.trace[1]
        ctrl.apply_settings(replace(ctrl.settings, peek_next_step=False))
        assert ctrl.next_step is None


class TestTogglePlay:
    def test_noop_when_found(self):
        ctrl, _ = _make(target=14, auto_play=False)
        ctrl.start()
        ctrl.step_forward()
        assert ctrl.status is Status.FOUND
        before = ctrl.is_playing
        assert not ctrl.toggle_play()
        assert ctrl.is_playing == before

    def test_noop_when_not_found(self):
        ctrl, _ = _make(target=99, auto_play=False)
        ctrl.goto_step(3)
        assert not ctrl.toggle_play()
        assert ctrl.is_playing is False

    def test_noop_on_empty_trace(self):
        ctrl, _ = _make(sequence=(), target=1)
        assert not ctrl.toggle_play()
        assert ctrl.is_playing is False


class TestResetAndRetarget:
    def test_reset_keeps_trace_and_cancels_timers(self):
        ctrl, sched = _make(target=99)
        trace = ctrl.trace
        ctrl.start()
        ctrl.reset()
        assert ctrl.state == PlaybackState()
        assert ctrl.trace is trace
        sched.advance(10_000)
        assert ctrl.current_step_index == -1

    @pytest.mark.parametrize("bad", [None, "abc", "", float("nan"), float("inf"), True, [1], 10 ** 400])
    def test_invalid_target_is_rejected(self, bad):
        ctrl, _ = _make(target=14, auto_play=False)
        ctrl.start()
        before = (ctrl.state, ctrl.target, ctrl.trace)
        assert not ctrl.retarget(bad)
        assert (ctrl.state, ctrl.target, ctrl.trace) == before

    def test_retarget_without_autoplay_stays_idle(self):
        ctrl, sched = _make(target=14, auto_play=False)
        ctrl.start()
        assert ctrl.retarget("5")
        assert ctrl.target == 5
        assert ctrl.trace == build_trace(SEQ, 5, "iterative")
        assert ctrl.state == PlaybackState()
        sched.advance(1000)
        assert ctrl.status is Status.IDLE

    def test_retarget_with_autoplay_arms_restart(self):
        ctrl, sched = _make(target=14, auto_play=True)
        ctrl.retarget(99)
        assert ctrl.pending_restart
        assert ctrl.status is Status.IDLE
        sched.advance(159)
        assert ctrl.status is Status.IDLE
        sched.advance(1)
        assert ctrl.status is Status.SEARCHING
        assert ctrl.current_step_index == 0
        assert not ctrl.pending_restart

    def test_ease_motion_shortens_restart(self):
        ctrl, sched = _make(target=14, auto_play=True, ease_motion=True)
        ctrl.retarget(99)
        sched.advance(80)
        assert ctrl.status is Status.SEARCHING

    def test_restart_on_empty_trace_is_not_found(self):
        ctrl, sched = _make(sequence=(), target=1, auto_play=True)
        ctrl.retarget(4)
        sched.advance(160)
        assert ctrl.status is Status.NOT_FOUND
        assert not ctrl.pending_restart

    def test_retarget_cancels_previous_playback(self):
        ctrl, sched = _make(target=99, step_delay=650, auto_play=True)
        ctrl.start()
        sched.advance(600)
        ctrl.retarget(2)
        sched.advance(160)
        assert ctrl.current_step_index == 0
        assert ctrl.target == 2

    def test_float_target(self):
        ctrl, _ = _make(auto_play=False)
        assert ctrl.retarget("9.5")
        assert ctrl.target == 9.5
        assert ctrl.trace[-1].direction is Direction.MISS


class TestAutoLoop:
    def test_loop_picks_seeded_target(self):
        ctrl, sched = _make(target=14, auto_play=False, loop_on_complete=True, step_delay=650)
        ctrl.start()
        ctrl.step_forward()
        assert ctrl.status is Status.FOUND
        expected = pick_loop_target(SEQ, ctrl.settings.seed, 1,
                                    ctrl.settings.min_value, ctrl.settings.max_value)
        sched.advance(769)
        assert ctrl.target == 14
        sched.advance(1)
        assert ctrl.target == expected
        assert ctrl.state == PlaybackState()

    def test_full_autoplay_cycle(self):
        ctrl, sched = _make(target=14, auto_play=True, loop_on_complete=True, step_delay=650)
        ctrl.start()
        sched.advance(650)
        assert ctrl.status is Status.FOUND
        sched.advance(770)
        assert ctrl.pending_restart
        assert ctrl.status is Status.IDLE
        sched.advance(160)
        assert not ctrl.pending_restart
        assert ctrl.current_step_index == 0
        assert ctrl.status is not Status.IDLE

    def test_loop_after_miss(self):
        ctrl, sched = _make(target=99, auto_play=False, loop_on_complete=True, step_delay=120)
        ctrl.goto_step(3)
        sched.advance(240)
        assert ctrl.target in SEQ

    def test_stepping_back_cancels_cooldown(self):
        ctrl, sched = _make(target=14, auto_play=False, loop_on_complete=True)
        ctrl.start()
        ctrl.step_forward()
        ctrl.step_backward()
        sched.advance(10_000)
        assert ctrl.target == 14

    def test_step_delay_change_reschedules_cooldown(self):
        ctrl, sched = _make(target=14, auto_play=False, loop_on_complete=True, step_delay=650)
        ctrl.start()
        ctrl.step_forward()
        sched.advance(100)
        ctrl.apply_settings(ctrl.settings.update("step_delay", 200))
        sched.advance(319)
        assert ctrl.status is Status.FOUND
        sched.advance(1)
        assert ctrl.state == PlaybackState()

    def test_no_loop_when_disabled(self):
        ctrl, sched = _make(target=14, auto_play=False, loop_on_complete=False)
        ctrl.start()
        ctrl.step_forward()
        assert sched.pending == 0

    def test_cooldown_timing(self):
        assert replace(DEFAULT_SETTINGS, step_delay=650).loop_cooldown_ms == 770
        assert replace(DEFAULT_SETTINGS, step_delay=50).loop_cooldown_ms == 220


class TestSettingsCascade:
    def test_regenerate_recenters_target(self):
        ctrl, sched = _make()
        ctrl.start()
        ctrl.regenerate(seed=1234)
        assert ctrl.settings.seed == 1234
        assert ctrl.sequence == generate(ctrl.settings.array_size, ctrl.settings.min_value,
                                         ctrl.settings.max_value, 1234)
        assert ctrl.target == ctrl.sequence[len(ctrl.sequence) // 2]
        assert ctrl.state == PlaybackState()
        sched.advance(10_000)
        assert ctrl.state == PlaybackState()

    def test_array_size_change_regenerates(self):
        ctrl, _ = _make()
        ctrl.apply_settings(ctrl.settings.update("array_size", 20))
        assert len(ctrl.sequence) == 20

    def test_variant_change_resets_but_keeps_target(self):
        ctrl, _ = _make(target=99, auto_play=False)
        ctrl.goto_step(2)
        ctrl.apply_settings(ctrl.settings.update("variant", "recursive"))
        assert ctrl.target == 99
        assert ctrl.state == PlaybackState()
        assert ctrl.trace == build_trace(SEQ, 99, "recursive")

    def test_step_delay_change_reschedules(self):
        ctrl, sched = _make(target=99, step_delay=650)
        ctrl.start()
        sched.advance(100)
        ctrl.apply_settings(ctrl.settings.update("step_delay", 200))
        sched.advance(199)
        assert ctrl.current_step_index == 0
        sched.advance(1)
        assert ctrl.current_step_index == 1

    def test_turning_autoplay_off_while_searching_pauses(self):
        ctrl, sched = _make(target=99)
        ctrl.start()
        ctrl.apply_settings(ctrl.settings.update("auto_play", False))
        assert not ctrl.is_playing
        sched.advance(5000)
        assert ctrl.current_step_index == 0

    def test_same_settings_is_noop(self):
        calls = []
        ctrl, _ = _make()
        ctrl.on_change = calls.append
        ctrl.apply_settings(ctrl.settings)
        assert calls == []


class TestLifecycle:
    def test_close_cancels_everything(self):
        ctrl, sched = _make(target=99)
        ctrl.start()
        ctrl.close()
        sched.advance(10_000)
        assert ctrl.current_step_index == 0
        assert sched.pending == 0

    def test_on_change_fires(self):
        seen = []
        ctrl, sched = _make(target=99, step_delay=650)
        ctrl.on_change = seen.append
        ctrl.start()
        sched.advance(650)
        assert [s.current_step_index for s in seen] == [0, 1]

    def test_to_dict_is_json_ready(self):
        ctrl, _ = _make(target=14, auto_play=False)
        ctrl.start()
        data = ctrl.to_dict()
        assert data["status"] == "searching"
        assert data["current_step"]["direction"] == "right"
        assert data["sequence"] == list(SEQ)
        assert data["pseudocode_line"] == 8


class TestTransitionTable:
    def test_found_and_not_found_never_meet(self):
        assert Status.NOT_FOUND not in TRANSITIONS[Status.FOUND]
        assert Status.FOUND not in TRANSITIONS[Status.NOT_FOUND]

    def test_every_state_can_reset(self):
        for status in (Status.SEARCHING, Status.FOUND, Status.NOT_FOUND):
            assert Status.IDLE in TRANSITIONS[status]
