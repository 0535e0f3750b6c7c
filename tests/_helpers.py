"""Result unwrapping for assertions."""

import pytest
from kungfu import Error, Ok


def ok_value(result):
    match result:
        case Ok(value):
            return value
        case Error(err):
            pytest.fail(f"expected Ok, got Error({err!r})")


def error_value(result):
    match result:
        case Error(err):
            return err
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")
