import pytest

from compiler.bytecode import OpCode
from compiler.parser import compile_source, ParseError


def listing(source):
    return [str(instr) for instr in compile_source(source)]


def test_empty_program_is_just_exit():
    assert listing("") == ["EXIT"]
    assert listing("  \n\t\n") == ["EXIT"]


def test_let_and_print():
    assert listing("let x = 3 + 4  print x") == [
        "PUSH 3",
        "PUSH 4",
        "ADD",
        "SET_LOCAL 0",
        "GET_LOCAL 0",
        "PRINT",
        "EXIT",
    ]


@pytest.mark.parametrize("src, op", [
    ("print 1 + 2", "ADD"),
    ("print 1 - 2", "SUB"),
    ("print 1 == 2", "EQUAL"),
    ("print 1 < 2", "LESS_THAN"),
])
def test_binary_operators(src, op):
    assert listing(src) == ["PUSH 1", "PUSH 2", op, "PRINT", "EXIT"]


def test_operators_need_no_spaces():
    assert listing("print 1==2") == ["PUSH 1", "PUSH 2", "EQUAL", "PRINT", "EXIT"]


def test_slots_follow_declaration_order():
    prog = compile_source("let b = 1\nlet a = 2\nlet c = a\n")
    assert prog.local_index == {"b": 0, "a": 1, "c": 2}
    assert prog.num_locals == 3
    assert listing("let b = 1\nlet a = 2\nlet c = a\n")[-3:] == ["GET_LOCAL 1", "SET_LOCAL 2", "EXIT"]


def test_read_int_atom():
    assert listing("let n = read_int") == ["READ_INT", "SET_LOCAL 0", "EXIT"]


def test_if_patches_forward_offset():
    code = listing("let a = 1 if a then print a print 5")
    assert code == [
        "PUSH 1",
        "SET_LOCAL 0",
        "GET_LOCAL 0",
        "IF_NOT 2",
        "GET_LOCAL 0",
        "PRINT",
        "PUSH 5",
        "PRINT",
        "EXIT",
    ]


def test_if_with_block_body():
    code = listing("if 0 then begin print 1 print 2 end")
    assert code == ["PUSH 0", "IF_NOT 4", "PUSH 1", "PRINT", "PUSH 2", "PRINT", "EXIT"]


def test_nested_if_offsets():
    prog = compile_source("if 1 then if 0 then print 7\nprint 8")
    jumps = [(i, instr.imm.as_int()) for i, instr in enumerate(prog) if instr.op is OpCode.IF_NOT]
    # outer guard skips the whole inner if, inner guard skips only the print
    assert jumps == [(1, 4), (3, 2)]
    assert prog[1 + 4 + 1] == prog[3 + 2 + 1]


def test_assert_emits_skip_over_error():
    assert listing("assert 1 < 2") == ["PUSH 1", "PUSH 2", "LESS_THAN", "IF_TRUE 1", "ERROR", "EXIT"]


def test_block_markers_emit_nothing():
    assert listing("begin let x = 1 print x end") == listing("let x = 1 print x")
    assert listing("begin end") == ["EXIT"]


def test_comments_are_skipped():
    src = "# header\nprint 1 # trailing\n#\nprint 2\n# last line without newline"
    assert listing(src) == ["PUSH 1", "PRINT", "PUSH 2", "PRINT", "EXIT"]


def test_undeclared_variable():
    with pytest.raises(ParseError, match='undeclared variable "zz"') as exc:
        compile_source("let a = 1\nprint  zz")
    assert (exc.value.line, exc.value.col) == (2, 8)


def test_variable_cannot_reference_itself():
    with pytest.raises(ParseError, match="undeclared variable"):
        compile_source("let x = x")


def test_redeclaration_rejected():
    with pytest.raises(ParseError, match='"x" already declared'):
        compile_source("let x = 1  let x = 2")


def test_redeclaration_inside_block_rejected():
    with pytest.raises(ParseError, match="already declared"):
        compile_source("let x = 1 begin let x = 2 end")


def test_invalid_statement_shows_snippet():
    with pytest.raises(ParseError) as exc:
        compile_source("print 1\nfoo = 1\n")
    assert str(exc.value) == 'invalid statement: "foo = 1  [...]"'
    assert exc.value.line == 2


def test_expressions_do_not_chain():
    with pytest.raises(ParseError, match="invalid statement"):
        compile_source("print 1 + 2 + 3")


def test_missing_then():
    with pytest.raises(ParseError, match='expected token "then"'):
        compile_source("if 1 print 2")


def test_missing_equals_in_let():
    with pytest.raises(ParseError, match='expected token "="'):
        compile_source("let x 5")


def test_unterminated_block():
    with pytest.raises(ParseError, match='expected token "end"'):
        compile_source("begin print 1\n  ")


def test_invalid_expression():
    with pytest.raises(ParseError, match="invalid expression"):
        compile_source("print +")


def test_if_without_body_at_end_of_input():
    with pytest.raises(ParseError, match="invalid statement"):
        compile_source("if 1 then")
