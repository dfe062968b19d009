"""Tests for the advance history."""
from bigbean.models.session_models import SessionSnapshot
from bigbean.services import history
from bigbean.services.history import AdvanceCommand


def make_command(anchor: str, learnt_word=None) -> AdvanceCommand:
    return AdvanceCommand(
        previous=SessionSnapshot(current_anchor=anchor, anchor_card_count=1, max_cards_for_anchor=3),
        learnt_word=learnt_word,
    )


def test_push_and_pop() -> None:
    first, second = make_command("apple-n-0"), make_command("tree-n-0")
    stack = history.push(history.push((), first), second)
    assert stack == (first, second)

    command, stack = history.pop(stack)
    assert command is second
    command, stack = history.pop(stack)
    assert command is first
    assert stack == ()


def test_pop_empty() -> None:
    assert history.pop(()) == (None, ())


def test_push_drops_oldest_past_limit() -> None:
    commands = [make_command(f"w{i}-n-0") for i in range(5)]
    stack = ()
    for command in commands:
        stack = history.push(stack, command, limit=3)
    assert stack == tuple(commands[2:])


def test_invert_without_learnt_word(mocker) -> None:
    store = mocker.Mock()
    command = make_command("apple-n-0")

    assert command.invert(store) == command.previous
    store.set_learnt.assert_not_called()


def test_invert_reverts_learnt_flip(mocker) -> None:
    store = mocker.Mock()
    command = make_command("tree-n-0", learnt_word="apple-n-0")

    assert command.invert(store) == command.previous
    store.set_learnt.assert_called_once_with("apple-n-0", False)
