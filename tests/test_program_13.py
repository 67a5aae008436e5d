from pathlib import Path

from bucl.interpreter import parse_program, Interpreter


EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_13_string_builtins(capsys):
    with open(EXAMPLES / 'program_13.bucl', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['11 6 world -1 rld', '1']
