from pathlib import Path

from bucl.interpreter import parse_program, Interpreter


EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_4_math(capsys):
    with open(EXAMPLES / 'program_4.bucl', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines[0] == '10 21 3.5 1 -1'
    assert out_lines[1] == '14'
