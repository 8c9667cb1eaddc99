"""Unit tests validating the block interpreter's directives and branching."""

from backend.simplelogic.interpreter import Interpreter, run
from backend.simplelogic.store import MemoryVariableStore
from backend.simplelogic.values import Value


def test_say_concatenates_with_single_spaces():
    it = Interpreter(MemoryVariableStore())
    code = 'SAY "Hello"\nSAY there\nSAY "big world"'
    assert it.run(code) == 'Hello there big world'


def test_if_true_branch():
    it = Interpreter(MemoryVariableStore())
    assert it.run('IF 1 == 1\nSAY "A"\nEND') == 'A'


def test_if_false_takes_else():
    it = Interpreter(MemoryVariableStore())
    assert it.run('IF 1 == 2\nSAY "A"\nELSE\nSAY "B"\nEND') == 'B'


def test_first_true_branch_wins():
    it = Interpreter(MemoryVariableStore())
    code = 'IF 1==1\nSAY "A"\nELSE IF 1==1\nSAY "B"\nEND'
    assert it.run(code) == 'A'


def test_else_if_chain_picks_matching_branch():
    store = MemoryVariableStore({'age': '15'})
    it = Interpreter(store)
    code = (
        'IF age >= 18\n'
        '  SAY "adult"\n'
        'ELSE IF age >= 13\n'
        '  SAY "teen"\n'
        'ELSE\n'
        '  SAY "child"\n'
        'END\n'
    )
    assert it.run(code) == 'teen'


def test_directives_are_case_insensitive():
    it = Interpreter(MemoryVariableStore())
    assert it.run('if 1 == 1\n  say "x"\nelse\n  say "y"\nend') == 'x'


def test_blank_lines_and_indentation_are_ignored():
    it = Interpreter(MemoryVariableStore())
    code = '\n\n   IF 2 > 1   \r\n\n      SAY "ok"\r\n   END\n\n'
    assert it.run(code) == 'ok'


def test_unknown_lines_are_ignored():
    it = Interpreter(MemoryVariableStore())
    assert it.run('PRINT "x"\nSAY "y"\nwhatever') == 'y'


def test_else_without_if_reports_and_continues():
    it = Interpreter(MemoryVariableStore())
    assert it.run('ELSE\nSAY "x"') == '[Error: ELSE without IF]x'


def test_else_if_without_if_reports_and_continues():
    it = Interpreter(MemoryVariableStore())
    out = it.run('ELSE IF 1 == 1\nSAY "still here"')
    assert out == '[Error: ELSE IF without IF]still here'


def test_extra_end_is_ignored():
    it = Interpreter(MemoryVariableStore())
    assert it.run('END\nIF 1 == 1\nSAY "a"\nEND\nEND\nSAY "b"') == 'a b'


def test_set_then_compare_as_number():
    store = MemoryVariableStore()
    it = Interpreter(store)
    out = it.run('SET x = 5\nIF x == 5\nSAY "five"\nELSE\nSAY "other"\nEND')
    assert out == 'five'
    assert store.get('x') == '5'


def test_set_strips_quotes_and_ignores_bad_syntax():
    store = MemoryVariableStore()
    it = Interpreter(store)
    it.run('SET name = "Bob"\nSET broken\nSET a = b = c')
    assert store.snapshot() == {'name': 'Bob'}


def test_setvar_boolean_reads_back_as_boolean():
    store = MemoryVariableStore()
    it = Interpreter(store)
    it.run('SETVAR flag true')
    assert it.lookup('flag') == Value.boolean(True)
    assert it.run('IF flag == true\nSAY "on"\nEND') == 'on'
    # a boolean is not the string "true"
    assert it.run('IF flag == "true"\nSAY "string"\nEND') == ''


def test_setvar_infers_types():
    store = MemoryVariableStore()
    it = Interpreter(store)
    it.run('SETVAR n 2.50\nSETVAR s "hello world"\nSETVAR raw hi there\nSETVAR lonely')
    assert store.get('n') == '2.5'
    assert store.get('s') == 'hello world'
    assert store.get('raw') == 'hi there'
    assert store.get('lonely') is None
    assert it.lookup('n') == Value.number(2.5)


def test_random_bounds_hold_over_many_runs():
    it = Interpreter(MemoryVariableStore())
    never = 'IF RANDOM < 0\nSAY "never"\nEND'
    always = 'IF RANDOM < 1\nSAY "always"\nEND'
    for _ in range(500):
        assert it.run(never) == ''
        assert it.run(always) == 'always'


def test_contains_is_case_insensitive():
    it = Interpreter(MemoryVariableStore())
    assert it.run('IF "Hello World" CONTAINS "world"\nSAY "yes"\nEND') == 'yes'
    assert it.run('IF "Hello World" has "MOON"\nSAY "yes"\nEND') == ''


def test_same_script_twice_gives_same_output():
    store = MemoryVariableStore({'mood': 'happy'})
    it = Interpreter(store)
    code = 'IF mood == "happy"\nSAY "Great"\nELSE\nSAY "Oh"\nEND\nSAY "bye"'
    assert it.run(code) == it.run(code) == 'Great bye'


def test_module_level_run_helper():
    store = MemoryVariableStore()
    assert run('SET a = 1\nIF a < 2\nSAY "small"\nEND', store) == 'small'
