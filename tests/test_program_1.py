from pathlib import Path

from bucl.interpreter import parse_program, Interpreter


EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_1_hello(capsys):
    with open(EXAMPLES / 'program_1.bucl', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['Hello World!!']
