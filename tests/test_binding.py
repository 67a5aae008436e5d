import pytest

from bucl.ast import Literal, Template, VarRef
from bucl.environment import Environment
from bucl.errors import BuclError, BINDING_ERROR, EVALUATION_ERROR
from bucl.interpreter import Interpreter, param_name, parse_program
from bucl.namespace import FunctionNamespace


def make_interpreter(**functions):
    namespace = FunctionNamespace(use_filesystem=False)
    for name, source in functions.items():
        namespace.define(name, source)
    return Interpreter(namespace=namespace, echo=False)


def run(source, **functions):
    interp = make_interpreter(**functions)
    return interp.run(parse_program(source))


@pytest.mark.parametrize('path, expected', [
    ('port', 'port'),
    ('db/port', 'port'),
    ('list/0', None),
    ('3', None),
    ('args', None),
    ('x/count', None),
    ('target', None),
])
def test_param_name(path, expected):
    assert param_name(path) == expected


def test_positional_and_argument_structure():
    show = (
        'echo {argc}\n'
        'echo {0} {1} {2}\n'
        'echo {args/count} {args/length} "{args}"\n'
        'echo {args/1}\n'
    )
    out = run('{list} = b c\nshow a {list}\n', show=show)
    assert out == ['3', 'a b c', '3 3 a b c', 'b']


def test_named_parameter_from_last_segment():
    out = run('{cfg/port} = 8080\n{r} show {cfg/port}\necho {r}\n', show='{return} = "port={port}"\n')
    assert out == ['port=8080']


def test_struct_expansion():
    source = (
        '{db/host} = localhost\n'
        '{db/port} = 3306\n'
        '{r} connect {db}\n'
        'echo {r}\n'
    )
    out = run(source, connect='{return} = "{host}:{port} argc={argc} {0} {1}"\n')
    assert out == ['localhost:3306 argc=2 localhost 3306']


def test_array_arguments_contribute_no_names():
    out = run('{values} = 1 2\n{r} f {values}\necho {r}\n', f='{return} = "[{values}] {argc}"\n')
    assert out == ['[] 2']


@pytest.mark.parametrize('first, second', [('a/port', 'b/port'), ('b/port', 'a/port')])
def test_duplicate_named_parameter(first, second):
    source = f'{{a/port}} = 1\n{{b/port}} = 2\n{{r}} f {{{first}}} {{{second}}}\n'
    with pytest.raises(BuclError) as exc:
        run(source, f='{return} = 1\n')
    assert exc.value.err.name == BINDING_ERROR
    assert "'port'" in exc.value.err.message
    assert exc.value.err.line == 3


def test_duplicate_named_parameter_is_checked_before_builtins_run():
    with pytest.raises(BuclError) as exc:
        run('{a/x} = 1\n{b/x} = 2\necho {a/x} {b/x}\n')
    assert exc.value.err.name == BINDING_ERROR


def test_same_reference_twice_is_not_a_collision():
    out = run('{x} = 5\necho {x} {x}\n')
    assert out == ['5 5']


def test_literals_and_templates_bind_no_names():
    out = run('{r} f port "port"\necho {r}\n', f='{return} = "<{port}>"\n')
    assert out == ['<>']


def test_target_name_is_visible_to_the_callee():
    out = run('{n} = 7\n{result/{n}} f\necho {result/7}\n', f='{return} = {target}\n')
    assert out == ['result/7']


def test_callee_does_not_see_caller_variables():
    out = run('{secret} = 42\n{r} f\necho "[{r}]"\n', f='{return} = {secret}\n')
    assert out == ['[]']


def test_return_subvariables_overlay_target():
    source = (
        '{r} pair\n'
        'echo "{r}" {r/count} {r/0} {r/1} {r/label}\n'
    )
    pair = (
        '{return} = left right\n'
        '{return/label} = "two"\n'
    )
    out = run(source, pair=pair)
    # the target is now an array, so interpolating it joins the elements
    assert out == ['left right 2 left right two']


def test_explicit_return_count_wins():
    source = '{r} f\necho {r} {r/count}\n'
    out = run(source, f='{return} = a b c\n{return/count} = 2\n')
    assert out == ['a b 2']


def test_call_without_target_discards_return():
    out = run('f\necho "[{return}]"\n', f='{return} = 1\necho inside\n')
    assert out == ['inside', '[]']


def test_unknown_function():
    with pytest.raises(BuclError) as exc:
        run('nosuchthing 1 2\n')
    assert exc.value.err.name == BINDING_ERROR
    assert 'nosuchthing' in exc.value.err.message


def test_runaway_recursion_is_an_evaluation_error():
    with pytest.raises(BuclError) as exc:
        run('loop\n', loop='loop\n')
    assert exc.value.err.name == EVALUATION_ERROR
    assert 'call depth' in exc.value.err.message


def test_function_lookup_from_base_dir(tmp_path):
    functions = tmp_path / 'functions'
    functions.mkdir()
    (functions / 'double.bucl').write_text('{return} math "{0}*2"\n', encoding='utf-8')
    interp = Interpreter(namespace=FunctionNamespace(base_dir=tmp_path), echo=False)
    assert interp.run(parse_program('{d} double 21\necho {d}\n')) == ['42']


def test_defined_functions_shadow_the_standard_library():
    out = run('{r} reverse abc\necho {r}\n', reverse='{return} = "mine"\n')
    assert out == ['mine']


def test_evaluate_list_splices_only_direct_references():
    interp = make_interpreter()
    env = Environment()
    env.assign('list', ['a', 'b'])
    env.assign('one', ['x'])
    args = [VarRef('list'), Template('[{list}]'), Literal('z'), VarRef('one'), VarRef('unset')]
    assert interp.evaluate_list(args, env) == ['a', 'b', '[a b]', 'z', 'x', '']
    assert interp.evaluate_one(VarRef('list'), env) == 'ab'


def test_struct_expansion_wins_over_array_splicing():
    source = (
        '{x} = a b\n'
        '{x/label} = L\n'
        '{r} f {x}\n'
        'echo {r}\n'
    )
    out = run(source, f='{return} = "{label} {argc} {0}"\n')
    assert out == ['L 1 L']


def test_struct_children_collide_with_other_named_parameters():
    source = '{db/port} = 1\n{port} = 2\n{r} f {db} {port}\n'
    with pytest.raises(BuclError) as exc:
        run(source, f='{return} = 1\n')
    assert exc.value.err.name == BINDING_ERROR
