from linked_list import LinkedList
from operation import Operation, OperationControl, OperationResult, Outcome, done, failed
from settings import Pacing
from sound import RecordingSound
from stack import Stack


def test_result_truthiness():
    assert done("ok")
    assert not failed(Outcome.NOT_FOUND, "missing")
    assert OperationResult(Outcome.OK).ok


def test_control_is_exclusive():
    control = OperationControl()
    assert control.acquire("a")
    assert not control.acquire("b")
    control.release()
    assert control.acquire("b")


def test_second_operation_is_rejected_without_mutation(quick):
    stack = Stack(**quick)
    first = stack.push(1)
    second = stack.push(2)
    assert second.done
    assert second.result.outcome is Outcome.REJECTED
    assert first.run().ok
    assert stack.values() == [1]


def test_update_waits_for_step_pause():
    stack = Stack(pacing=Pacing(1.0), sound=RecordingSound())
    op = stack.push("a")
    op.update(0)
    assert len(stack) == 0
    assert op.current.message == 'Pushing "a" to stack...'
    op.update(199)
    assert len(stack) == 0
    op.update(1)
    assert len(stack) == 1
    assert not op.done
    op.update(199)
    assert not op.done
    op.update(1)
    assert op.done
    assert op.result.message == "Item pushed to index 0"


def test_pacing_scale_zero_runs_in_one_update():
    stack = Stack(pacing=Pacing(0.0), sound=RecordingSound())
    op = stack.push("a")
    op.update(0)
    assert op.done


def test_finished_operation_loads_player_at_end(quick):
    stack = Stack(**quick)
    result = stack.push(5).run()
    assert stack.player.total_steps == len(result.steps) == 3
    assert stack.player.index == 2
    assert stack.current_step().message == "Item pushed to index 0"


def test_teardown_cancels_silently():
    sound = RecordingSound()
    stack = Stack(pacing=Pacing(1.0), sound=sound)
    op = stack.push("a")
    op.update(0)
    stack.teardown()
    op.update(1000)
    assert op.done
    assert op.result.outcome is Outcome.CANCELLED
    assert not stack.busy
    assert stack.player.total_steps == 0
    assert stack.push("b").result.outcome is Outcome.REJECTED


def test_recorded_steps_survive_later_mutation(quick):
    stack = Stack(**quick)
    first = stack.push(1).run()
    stack.push(2).run()
    assert len(first.steps[-1].state["items"]) == 1


def test_sync_edit_rejected_while_timeline_plays(quick):
    linked = LinkedList(**quick)
    assert linked.insert_tail(40).ok
    assert linked.player.is_playing
    assert linked.clear().outcome is Outcome.REJECTED
    linked.player.pause()
    assert linked.clear().ok
    assert linked.values() == []


def test_finished_constructor():
    op = Operation.finished("noop", done("fine"))
    assert op.done
    assert op.run().message == "fine"
