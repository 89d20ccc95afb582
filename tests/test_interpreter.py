import pytest

from minilux.errors import (
    ArityMismatch, ArrayUnderflow, DivisionByZero, IndexOutOfBounds, MiniluxRuntimeError,
    TypeMismatch, UndefinedVariable, UnknownFunction,
)
from minilux.interpreter import run_program


def output_of(source, capsys):
    run_program(source)
    return capsys.readouterr().out


def test_arithmetic_precedence():
    interp = run_program('$a = 1 + 2 * 3\n$b = (1 + 2) * (3 + 7)')
    assert interp.global_env.get('a') == 7
    assert interp.global_env.get('b') == 30


def test_integers_wrap_at_64_bits():
    interp = run_program('$x = 9223372036854775807 + 1')
    assert interp.global_env.get('x') == -9223372036854775808


@pytest.mark.parametrize('source', ['$x = 10 / 0', '$x = 10 % 0'])
def test_division_by_zero(source):
    with pytest.raises(DivisionByZero):
        run_program(source)


@pytest.mark.parametrize('source', [
    '$x = "a" + 1',
    '$x = "a" * "b"',
    'if ("a" < 1) { }',
    '$x = (1 < 2)',
    'print(1 == 1)',
    '$x = -"a"',
    'if ("abc" =~ "b") { }',
    'inc $s + 1',
])
def test_type_mismatch(source):
    source = '$s = "text"\n' + source
    with pytest.raises(TypeMismatch):
        run_program(source)


def test_undefined_variable_reports_position():
    with pytest.raises(UndefinedVariable) as excinfo:
        run_program('$a = 1\n$b = $a + $nope')
    assert excinfo.value.line == 2
    assert str(excinfo.value) == 'UndefinedVariable: undefined variable $nope at 2:1'


def test_text_comparison_and_equality(capsys):
    source = '''
if ("apple" < "banana") {
    print("ordered")
}
if (("a" == "a") AND (1 != 2)) {
    print("both")
}
if (!("x" == "y")) {
    print("negated")
}
'''
    assert output_of(source, capsys) == 'ordered\nboth\nnegated\n'


def test_logical_operators_short_circuit(capsys):
    source = '''
if ((1 == 1) OR ($missing == 1)) {
    print("or")
}
if ((1 == 2) AND ($missing == 1)) {
    print("never")
}
'''
    assert output_of(source, capsys) == 'or\n'


def test_truthiness_of_plain_values(capsys):
    source = '''
$empty = ""
$list = [0]
if ($empty) { print("empty") }
if ($list) { print("list") }
if (0) { print("zero") }
'''
    assert output_of(source, capsys) == 'list\n'


def test_push_pop_round_trip():
    interp = run_program('$a = [1, "two"]\npush $a, 3\n$x = pop $a')
    assert interp.global_env.get('a').items == [1, 'two']
    assert interp.global_env.get('x') == 3


def test_shift_and_unshift():
    interp = run_program('$a = [2]\nunshift $a, 1\n$first = shift $a\n$second = shift $a')
    assert interp.global_env.get('first') == 1
    assert interp.global_env.get('second') == 2
    assert interp.global_env.get('a').items == []


def test_push_on_unset_variable_creates_array():
    interp = run_program('push $fresh, "x"')
    assert interp.global_env.get('fresh').items == ['x']


@pytest.mark.parametrize('source, error', [
    ('$a = []\npop $a', ArrayUnderflow),
    ('$a = []\nshift $a', ArrayUnderflow),
    ('pop $never', UndefinedVariable),
    ('$n = 3\npush $n, 1', TypeMismatch),
])
def test_array_mutation_errors(source, error):
    with pytest.raises(error):
        run_program(source)


def test_arrays_are_copied_on_assignment():
    interp = run_program('$a = [1]\n$b = $a\npush $b, 2\n$nested = [$a]\npush $a, 3')
    assert interp.global_env.get('a').items == [1, 3]
    assert interp.global_env.get('b').items == [1, 2]
    assert interp.global_env.get('nested').items[0].items == [1]


def test_indexing_arrays_and_text():
    interp = run_program('$a = [10, 20, 30]\n$s = "abc"\n$x = $a[2]\n$c = $s[1]\n$a[0] = 5')
    assert interp.global_env.get('x') == 30
    assert interp.global_env.get('c') == 'b'
    assert interp.global_env.get('a').items == [5, 20, 30]


@pytest.mark.parametrize('source', ['$x = [1, 2][2]', '$x = "ab"[-1]', '$a = [1]\n$a[1] = 2'])
def test_index_out_of_bounds(source):
    with pytest.raises(IndexOutOfBounds):
        run_program(source)


def test_function_call_and_recursion(capsys):
    source = '''
function add($a, $b) {
    return $a + $b
}
function fib($n) {
    if ($n < 2) {
        return $n
    }
    return fib($n - 1) + fib($n - 2)
}
print(add(2, 3), " ", fib(15))
'''
    assert output_of(source, capsys) == '5 610\n'


def test_functions_read_globals_but_write_locally():
    source = '''
$greeting = "hi"
$count = 1
function bump() {
    $count = 100
    $seen = $greeting
    return $seen
}
$r = bump()
'''
    interp = run_program(source)
    assert interp.global_env.get('r') == 'hi'
    assert interp.global_env.get('count') == 1
    assert not interp.global_env.has_local('seen')


GLOBAL_ARRAY = '''
$g = [1, 2, 3]
function f() {
%s
}
$r = f()
'''


@pytest.mark.parametrize('body, expected', [
    ('    $n = len($g)\n    $x = pop $g\n    return $x', 3),
    ('    $x = shift $g\n    $y = shift $g\n    return $y', 2),
    ('    push $g, 4\n    return len($g)', 4),
    ('    unshift $g, 0\n    return $g[0] + len($g)', 4),
    ('    $g[0] = 9\n    return $g[0] + $g[1]', 11),
])
def test_functions_mutate_a_private_copy_of_global_arrays(body, expected):
    interp = run_program(GLOBAL_ARRAY % body)
    assert interp.global_env.get('r') == expected
    assert interp.global_env.get('g').items == [1, 2, 3]


def test_mutating_unset_array_inside_function():
    with pytest.raises(UndefinedVariable):
        run_program('function f() {\n    pop $never\n}\n$r = f()')
    with pytest.raises(TypeMismatch):
        run_program('$n = 1\nfunction f() {\n    push $n, 2\n}\n$r = f()')


def test_arguments_are_passed_by_value():
    source = '''
function grow($list) {
    push $list, 99
    return len($list)
}
$a = [1]
$n = grow($a)
'''
    interp = run_program(source)
    assert interp.global_env.get('n') == 2
    assert interp.global_env.get('a').items == [1]


def test_function_without_return_yields_empty_text():
    interp = run_program('function noop() {\n    $x = 1\n}\n$r = noop()')
    assert interp.global_env.get('r') == ''


def test_return_from_inside_loop():
    source = '''
function first_over($limit) {
    $i = 0
    while ($i < 100) {
        if ($i > $limit) {
            return $i
        }
        inc $i + 1
    }
    return -1
}
$r = first_over(4)
'''
    assert run_program(source).global_env.get('r') == 5


def test_user_function_shadows_builtin(capsys):
    source = 'function upper($s) {\n    return "custom"\n}\nprint(upper("a"))'
    assert output_of(source, capsys) == 'custom\n'


def test_call_errors():
    with pytest.raises(ArityMismatch):
        run_program('function f($a) { return $a }\n$x = f(1, 2)')
    with pytest.raises(ArityMismatch):
        run_program('$x = len("a", "b")')
    with pytest.raises(UnknownFunction):
        run_program('$x = nothing_here(1)')


def test_runaway_recursion_is_a_runtime_error():
    with pytest.raises(MiniluxRuntimeError) as excinfo:
        run_program('function down($n) {\n    return down($n + 1)\n}\n$x = down(0)')
    assert excinfo.value.kind == 'RecursionError'


def test_substitution_application(capsys):
    source = '''
$fix = s/o/O/g
print($fix("foo"))
print(s/([0-9]+)/<$1>/g("a1b22"))
print(s/z/Z/g("abc"))
print(s/o/0/("foo"))
'''
    assert output_of(source, capsys) == 'fOO\na<1>b<22>\nabc\nf0o\n'


def test_applying_non_substitution_fails():
    with pytest.raises(TypeMismatch):
        run_program('$r = /a/\n$x = $r("a")')
    with pytest.raises(TypeMismatch):
        run_program('$fix = s/a/b/\n$x = $fix(5)')


def test_print_renders_every_kind(capsys):
    source = 'printf(1, "-", [1, 2], "-", /ab/i, "-", s/a/b/g, "\\n")'
    assert output_of(source, capsys) == '1-[Array(2)]-/ab/-s/a/b/g\n'


def test_inc_and_dec():
    interp = run_program('$i = 10\ninc $i + 5\ndec $i - 3 * 2')
    assert interp.global_env.get('i') == 9
