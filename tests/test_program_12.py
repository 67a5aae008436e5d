from pathlib import Path

from bucl.interpreter import parse_program, Interpreter
from bucl.namespace import FunctionNamespace


EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_12_returned_struct(capsys):
    with open(EXAMPLES / 'program_12.bucl', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter(namespace=FunctionNamespace(base_dir=EXAMPLES))
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['(3, 4)', '3 4', 'x=3 y=4']
