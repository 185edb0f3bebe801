from typing import Tuple

EOF_CHAR = "\0"

INT64_MAX = 2**63 - 1


class ParseError(Exception):
    def __init__(self, message: str, line: int, col: int):
        super().__init__(message)
        self.line = line
        self.col = col


def is_ident_char(ch: str) -> bool:
    # ASCII only, so classification never depends on the locale
    return ch.isascii() and (ch.isalnum() or ch == "_")


class Scanner:
    """Character cursor over the program text.

    Keywords and operators are recognized with `try_consume`, which skips
    whitespace on both sides of the token. There is no separate token stream.
    """

    def __init__(self, source: str):
        self.source = source
        self.current = 0

    def at_end(self) -> bool:
        return self.current >= len(self.source)

    def peek(self) -> str:
        if self.at_end():
            return EOF_CHAR
        return self.source[self.current]

    def advance(self) -> str:
        if self.at_end():
            return EOF_CHAR
        ch = self.source[self.current]
        self.current += 1
        return ch

    def location(self) -> Tuple[int, int]:
        line = self.source.count("\n", 0, self.current) + 1
        col = self.current - (self.source.rfind("\n", 0, self.current) + 1) + 1
        return line, col

    def error(self, message: str) -> ParseError:
        line, col = self.location()
        return ParseError(message, line, col)

    def snippet(self, length: int = 10) -> str:
        text = self.source[self.current:self.current + length]
        return text.replace("\r", " ").replace("\n", " ")

    def skip_whitespace(self):
        while self.peek() in " \t\r\n":
            self.advance()

    def skip_line_comment(self):
        while not self.at_end():
            if self.advance() == "\n":
                break

    def try_consume(self, token: str) -> bool:
        start = self.current
        self.skip_whitespace()
        if not self.source.startswith(token, self.current):
            self.current = start
            return False
        self.current += len(token)
        self.skip_whitespace()
        return True

    def require(self, token: str):
        if not self.try_consume(token):
            self.skip_whitespace()
            raise self.error(f'expected token "{token}"')

    def read_identifier(self) -> str:
        start = self.current
        # a leading digit belongs to an integer literal
        if not self.peek().isdigit():
            while is_ident_char(self.peek()):
                self.advance()
        if self.current == start:
            raise self.error("expected identifier")
        return self.source[start:self.current]

    def read_unsigned_integer(self) -> int:
        start = self.current
        value = 0
        while self.peek().isascii() and self.peek().isdigit():
            value = value * 10 + (ord(self.advance()) - ord("0"))
            if value > INT64_MAX:
                self.current = start
                raise self.error("integer literal out of range")
        if self.current == start:
            raise self.error("expected integer")
        return value
