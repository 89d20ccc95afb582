from pathlib import Path

from minilux.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_5_arrays(capsys):
    with open(EXAMPLES / 'program_5.mi', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['len: 5', 'popped 4 shifted 0', 'now 1,2,3', '3 4', 'two']
    assert interp.global_env.get('list').items == [1, 'two', 3]
    assert interp.global_env.get('copy').items == [1, 2, 3, 99]
