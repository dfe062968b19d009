"""Tests for the terminal application."""
from typing import List

import pytest
from sqlalchemy.exc import OperationalError

from bigbean.app import HELP, BigBeanApp
from bigbean.services.anchor_scheduler import AnchorScheduler


def make_app(commands: List[str]):
    """Create an app that reads the given commands and records its output."""
    pending = iter(commands)
    output = []

    def read(prompt: str) -> str:
        try:
            return next(pending)
        except StopIteration:
            raise EOFError

    return BigBeanApp(read=read, write=output.append), output


@pytest.fixture
def vocabulary(vocab):
    for i in range(4):
        vocab.combo(f"apple-{i}-g-0", "apple-n-0", f"side{i}-j-0")
    return vocab


def test_run_session(vocabulary) -> None:
    """Test advancing, going back and starting over."""
    app, output = make_app(["", "b", "x", "r", "q"])
    app.run()

    progress = [line for line in output if line.startswith("Learning:")]
    assert progress == [
        "Learning: apple (1/3)",
        "Learning: apple (2/3)",
        "Learning: apple (1/3)",
        "Learning: apple (1/3)",
    ]
    assert output.count(HELP) == 2
    assert "1 to learn | 0 learnt | 1 total" in output
    assert app.running is False
    assert app.db is None


def test_back_without_history(vocabulary) -> None:
    app, output = make_app(["b"])
    app.run()

    assert "Nothing to go back to" in output


def test_completion_screen(vocabulary) -> None:
    app, output = make_app(["n", "n", "n"])
    app.run()

    assert "All words learnt! You've completed all 1 base words." in output
    assert "0 to learn | 1 learnt | 1 total" in output


def test_database_error_is_reported(vocabulary, mocker) -> None:
    mocker.patch.object(
        AnchorScheduler,
        "advance",
        side_effect=OperationalError("UPDATE", {}, Exception("database is locked")),
    )
    app, output = make_app(["n", "q"])
    app.run()

    assert "Something went wrong talking to the database, try again" in output
