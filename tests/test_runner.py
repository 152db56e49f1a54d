# -*- coding: utf-8 -*-

import pytest

from sandbox.examples import DEFAULT_SCRIPT, EXAMPLES
from sandbox.runner import execute, format_value


def test_logs_and_returned_value():
    r = execute('print("a", 1)\nprint({"k": 2})\nreturn 3 * 7')
    assert r.ok
    assert r.logs[0] == "a 1"
    assert '"k": 2' in r.logs[1]
    assert r.value == 21


def test_script_without_return_has_no_value():
    r = execute("x = 1")
    assert r.ok
    assert r.value is None
    assert r.logs == []


def test_runtime_error_keeps_logs_and_drops_value():
    r = execute('print("before")\nreturn 1 / 0')
    assert r.logs == ["before"]
    assert r.value is None
    assert r.error.startswith("ZeroDivisionError")


def test_syntax_error_reports_line():
    r = execute("x = (\nreturn 1")
    assert r.error.startswith("SyntaxError")
    assert r.logs == []


@pytest.mark.parametrize(
    "source",
    [
        "import os",
        "from os import path",
        "x = ().__class__",
        "__import__('os')",
        "x = {}.mro",
        "class A:\n    pass",
        "try:\n    pass\nexcept:\n    pass",
        "g = (g.gi_frame.f_back.f_back.f_globals for x in [1])\nreturn list(g)[0]",
        "g = (x for x in [1])\nreturn g.gi_code",
        "return clock.now.f_globals",
        "try:\n    return 1 / 0\nexcept ZeroDivisionError as e:\n    return e.with_traceback(None).tb_frame",
        "try:\n    pass\nfinally:\n    pass",
        "n = 0\nwhile True:\n    try:\n        n = n + 1\n    finally:\n        continue",
        "try:\n    pass\nexcept clock.now:\n    pass",
        "try:\n    pass\nexcept (ValueError, clock):\n    pass",
        "Exception = 5",
        "def f(ValueError):\n    return 1",
        "try:\n    pass\nexcept ValueError as TypeError:\n    pass",
    ],
)
def test_rejected_constructs(source):
    r = execute(source)
    assert not r.ok
    assert "not allowed" in r.error


def test_only_enumerated_builtins_are_visible():
    r = execute("return open('/etc/passwd').read()")
    assert r.error.startswith("NameError")

    r = execute("return eval('1')")
    assert r.error.startswith("NameError")


def test_user_functions_and_comprehensions_work():
    r = execute(
        "def double(x):\n"
        "    return x * 2\n"
        "return [double(i) for i in range(3)]"
    )
    assert r.value == [0, 2, 4]


def test_runaway_script_is_stopped():
    r = execute("n = 0\nwhile True:\n    n += 1", time_limit=0.2)
    assert r.error == "Script exceeded 0.2 s time limit"
    assert r.value is None


def test_timeout_cannot_be_caught_by_the_script():
    r = execute(
        "while True:\n"
        "    try:\n"
        "        n = 1\n"
        "    except Exception:\n"
        "        pass",
        time_limit=0.2,
    )
    assert "time limit" in r.error


def test_range_is_capped():
    r = execute("return len(range(10 ** 7))")
    assert r.error.startswith("ValueError")
    assert "range()" in r.error


def test_capabilities_replace_the_default_scope():
    r = execute("return greeting", capabilities={"greeting": "hi"})
    assert r.value == "hi"
    r = execute("return clock", capabilities={})
    assert r.error.startswith("NameError")


def test_clock_is_in_scope_by_default():
    r = execute('return clock.parse("2024-01-01", "UTC").add(1, "day").iso()')
    assert r.value == "2024-01-02T00:00:00+00:00"


def test_bundled_scripts_run_cleanly():
    for source in [DEFAULT_SCRIPT] + [ex.code for ex in EXAMPLES]:
        r = execute(source)
        assert r.ok, r.error
        assert r.value is not None


def test_format_value():
    assert format_value("x") == "x"
    assert format_value([1, 2]) == "[\n  1,\n  2\n]"


def test_timeout_survives_recursion_errors_being_caught():
    r = execute(
        "def down(n):\n"
        "    return down(n + 1)\n"
        "while True:\n"
        "    try:\n"
        "        down(0)\n"
        "    except Exception:\n"
        "        pass",
        time_limit=0.3,
    )
    assert r.error == "Script exceeded 0.3 s time limit"


def test_allowed_except_filters():
    r = execute(
        "try:\n"
        "    {}['missing']\n"
        "except (KeyError, IndexError) as e:\n"
        "    return 'caught'"
    )
    assert r.value == "caught"


def test_fast_script_is_not_interrupted_after_finishing():
    r = execute("return sum(range(1000))", time_limit=0.05)
    assert r.value == 499500
