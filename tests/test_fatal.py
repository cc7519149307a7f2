import logging

import pytest

from skykv.fatal import exit_error, exit_on_error


def test_value_passes_through():
    assert exit_error(5, "unused") == 5
    assert exit_error("text", "unused") == "text"


def test_falsy_values_are_not_errors():
    assert exit_error(0, "unused") == 0
    assert exit_error("", "unused") == ""


def test_none_exits_with_code_one(caplog):
    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as info:
        exit_error(None, "missing value")
    assert info.value.code == 1
    assert "missing value" in caplog.text


def test_exception_exits_with_message(caplog):
    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as info:
        exit_error(ValueError("bad"), "failed")
    assert info.value.code == 1
    assert "failed : 'bad'" in caplog.text


def test_context_manager_exits_on_error(caplog):
    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as info:
        with exit_on_error("connecting"):
            raise OSError("refused")
    assert info.value.code == 1
    assert "connecting : 'refused'" in caplog.text


def test_context_manager_without_error_lets_block_finish():
    def compute():
        return 42

    wrapped = exit_on_error("never")(compute)
    assert wrapped() == 42


def _work(flag):
    if flag:
        raise RuntimeError("nope")
    return "done"


def test_decorator_form():
    work = exit_on_error("work failed")(_work)
    assert work(False) == "done"
    with pytest.raises(SystemExit) as info:
        work(True)
    assert info.value.code == 1