from .bytecode import OpCode, Value
from .program import Program
from .scanner import Scanner, ParseError, is_ident_char

__all__ = ["Parser", "ParseError", "compile_source"]

# Binary operators, tried in this order after the first atom
BINARY_OPS = (
    ("+", OpCode.ADD),
    ("-", OpCode.SUB),
    ("==", OpCode.EQUAL),
    ("<", OpCode.LESS_THAN),
)


class Parser:
    """Single-pass recursive descent parser.

    Instructions are emitted into `self.program` while parsing; no syntax
    tree is built.
    """

    def __init__(self, source: str):
        self.scanner = Scanner(source)
        self.program = Program()

    def parse(self) -> Program:
        sc = self.scanner
        while True:
            sc.skip_whitespace()
            if sc.at_end():
                break
            self._statement()
        self.program.append(OpCode.EXIT)
        return self.program

    # Statements
    def _statement(self):
        sc = self.scanner
        sc.skip_whitespace()

        if sc.peek() == "#":
            # not try_consume: that would also eat the newline ending the comment
            sc.advance()
            sc.skip_line_comment()
            return
        if sc.try_consume("let"):
            self._let_decl()
            return
        if sc.try_consume("if"):
            self._if_stmt()
            return
        if sc.try_consume("begin"):
            self._block()
            return
        if sc.try_consume("print"):
            self._expression()
            self.program.append(OpCode.PRINT)
            return
        if sc.try_consume("assert"):
            self._expression()
            # on success jump over the ERROR instruction
            self.program.append_with_imm(OpCode.IF_TRUE, Value.of_int(1))
            self.program.append(OpCode.ERROR)
            return

        raise sc.error(f'invalid statement: "{sc.snippet()} [...]"')

    def _let_decl(self):
        sc = self.scanner
        line, col = sc.location()
        name = sc.read_identifier()
        sc.require("=")
        self._expression()
        if self.program.lookup_local(name) is not None:
            raise ParseError(f'local variable "{name}" already declared', line, col)
        idx = self.program.declare_local(name)
        self.program.append_with_imm(OpCode.SET_LOCAL, Value.of_slot(idx))

    def _if_stmt(self):
        self._expression()
        self.scanner.require("then")
        # placeholder, patched once the guarded statement has been emitted
        jump_index = self.program.append_with_imm(OpCode.IF_NOT, Value.of_int(0))
        self._statement()
        offset = len(self.program) - jump_index - 1
        self.program.patch(jump_index, Value.of_int(offset))

    def _block(self):
        sc = self.scanner
        while not sc.try_consume("end"):
            sc.skip_whitespace()
            if sc.at_end():
                raise sc.error('expected token "end"')
            self._statement()

    # Expressions
    def _expression(self):
        self._atom()
        for token, op in BINARY_OPS:
            if self.scanner.try_consume(token):
                self._atom()
                self.program.append(op)
                return

    def _atom(self):
        sc = self.scanner
        sc.skip_whitespace()

        if sc.try_consume("read_int"):
            self.program.append(OpCode.READ_INT)
            return

        ch = sc.peek()
        if ch.isascii() and ch.isdigit():
            num = sc.read_unsigned_integer()
            self.program.append_with_imm(OpCode.PUSH, Value.of_int(num))
            return

        if is_ident_char(ch):
            line, col = sc.location()
            name = sc.read_identifier()
            idx = self.program.lookup_local(name)
            if idx is None:
                raise ParseError(f'reference to undeclared variable "{name}"', line, col)
            self.program.append_with_imm(OpCode.GET_LOCAL, Value.of_slot(idx))
            return

        raise sc.error("invalid expression")


def compile_source(source: str) -> Program:
    return Parser(source).parse()
