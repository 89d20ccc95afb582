import builtins
import json

import pytest

from minilux.__main__ import main


def write_script(tmp_path, source, name='script.mi'):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return path


def test_runs_script(tmp_path, capsys):
    script = write_script(tmp_path, '$name = "cli"\nprint("hello ", $name)\n')
    main([str(script)])
    assert capsys.readouterr().out == 'hello cli\n'


def test_runtime_error_exits_with_status_1(tmp_path, capsys):
    script = write_script(tmp_path, 'print("partial")\n$x = 1 / 0\n')
    with pytest.raises(SystemExit) as excinfo:
        main([str(script)])
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == 'partial\n'
    assert captured.err.strip() == 'Error: DivisionByZero: division by zero at 2:1'


def test_parse_error_runs_nothing(tmp_path, capsys):
    script = write_script(tmp_path, 'print("never")\nif ($a > 1 AND $b < 2) { }\n')
    with pytest.raises(SystemExit) as excinfo:
        main([str(script)])
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert captured.err.startswith('Error: ParseError: ')


@pytest.mark.parametrize('content, message', [
    ('{not json', 'Error: invalid AST file'),
    ('{"type": "Mystery"}', 'Error: invalid AST file'),
    (json.dumps({'type': 'Program', 'body': [
        {'type': 'ExprStmt', 'expr': {'type': 'RegexLit', 'pattern': '(', 'flags': ''}},
    ]}), 'Error: RegexCompileError'),
])
def test_bad_ast_file_reports_error(tmp_path, capsys, content, message):
    ast_path = write_script(tmp_path, content, name='bad.ast.json')
    with pytest.raises(SystemExit) as excinfo:
        main(['--ast', str(ast_path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith(message)


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / 'absent.mi')])
    assert excinfo.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_emit_and_run_ast(tmp_path, capsys):
    script = write_script(tmp_path, 'function twice($n) {\n    return $n * 2\n}\nprint(twice(21))\n')
    main(['--emit-ast', str(script)])
    ast_path = tmp_path / 'script.mi.ast.json'
    assert capsys.readouterr().out.strip() == str(ast_path)
    obj = json.loads(ast_path.read_text(encoding='utf-8'))
    assert obj['type'] == 'Program'
    main(['--ast', str(ast_path)])
    assert capsys.readouterr().out == '42\n'


def test_debug_log_records_calls(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    script = write_script(tmp_path, 'function id($v) {\n    return $v\n}\n$x = id(7)\n')
    main(['-vv', str(script)])
    log = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'define function id($v)' in log
    assert 'call id(7)' in log
    assert 'return id -> 7' in log
    assert 'assign $x = 7' in log


def test_repl_keeps_state_between_lines(monkeypatch, capsys):
    lines = iter(['$a = 2', 'print($a * 21)', 'print($nope)', 'print("still here")', 'exit'])
    monkeypatch.setattr(builtins, 'input', lambda prompt='': next(lines))
    main([])
    captured = capsys.readouterr()
    assert '42\n' in captured.out
    assert 'still here\n' in captured.out
    assert 'Error: UndefinedVariable' in captured.err


def test_repl_stops_at_end_of_input(monkeypatch, capsys):
    def eof(prompt=''):
        raise EOFError

    monkeypatch.setattr(builtins, 'input', eof)
    main([])
    assert 'Minilux' in capsys.readouterr().out
