from pathlib import Path

from minilux.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_6_regex(capsys):
    with open(EXAMPLES / 'program_6.mi', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['matched', 'Hell0 W0rld', 'a<1>b<22>', 'abc', 'SHOUT quiet']
