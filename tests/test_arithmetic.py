import pytest

from bucl.arithmetic import evaluate, format_number
from bucl.errors import BuclError, EVALUATION_ERROR


@pytest.mark.parametrize('expression, expected', [
    ('1+2*3', 7.0),
    ('(1+2)*3', 9.0),
    (' 10 - 4 - 3 ', 3.0),
    ('7%3', 1.0),
    ('-7%3', -1.0),
    ('-(2+3)', -5.0),
    ('+4', 4.0),
    ('1.5*2', 3.0),
    ('8/4/2', 1.0),
])
def test_evaluate(expression, expected):
    assert evaluate(expression) == expected


@pytest.mark.parametrize('expression, fragment', [
    ('10/0', 'division by zero'),
    ('5%0', 'modulo by zero'),
    ('', 'end of expression'),
    ('1+', 'end of expression'),
    ('2 x', "unexpected character 'x'"),
    ('1.2.3', 'invalid number'),
    ('(1+2', 'end of expression'),
])
def test_evaluation_errors(expression, fragment):
    with pytest.raises(BuclError) as exc:
        evaluate(expression)
    assert exc.value.err.name == EVALUATION_ERROR
    assert fragment in exc.value.err.message
    assert exc.value.err.message.startswith('math: ')


def test_format_number():
    assert format_number(10.0) == '10'
    assert format_number(-3.0) == '-3'
    assert format_number(3.5) == '3.5'
    assert format_number(0.1 + 0.2) == '0.30000000000000004'
