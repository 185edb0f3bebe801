from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar, Union


class ValueKindError(Exception):
    """Raised when a value is read through the accessor of another kind."""
    pass


class ValueKind(Enum):
    NONE = auto()
    SLOT = auto()          # local variable index
    INT = auto()           # signed 64-bit integer
    TEXT = auto()          # reserved, no opcode produces or consumes it


@dataclass(frozen=True)
class Value:
    kind: ValueKind
    payload: Union[int, str, None] = None

    NONE: ClassVar[Value]

    @staticmethod
    def of_slot(idx: int) -> Value:
        return Value(ValueKind.SLOT, idx)

    @staticmethod
    def of_int(num: int) -> Value:
        return Value(ValueKind.INT, num)

    @staticmethod
    def of_text(s: str) -> Value:
        return Value(ValueKind.TEXT, s)

    def _expect(self, kind: ValueKind):
        if self.kind is not kind:
            raise ValueKindError(f"expected {kind.name.lower()} value, got {self.kind.name.lower()}")
        return self.payload

    def as_slot(self) -> int:
        return self._expect(ValueKind.SLOT)

    def as_int(self) -> int:
        return self._expect(ValueKind.INT)

    def as_text(self) -> str:
        return self._expect(ValueKind.TEXT)

    def __str__(self) -> str:
        if self.kind is ValueKind.NONE:
            return ""
        if self.kind is ValueKind.TEXT:
            return f"{self.payload!r}"
        return str(self.payload)


Value.NONE = Value(ValueKind.NONE)


class OpCode(Enum):
    # Halting
    EXIT = auto()
    ERROR = auto()

    # Stack and locals
    PUSH = auto()          # operand: int literal
    GET_LOCAL = auto()     # operand: slot index
    SET_LOCAL = auto()     # operand: slot index

    # Comparisons (push 0/1)
    EQUAL = auto()
    LESS_THAN = auto()

    # Control flow, operand: relative offset added after the usual +1
    IF_TRUE = auto()
    IF_NOT = auto()

    # Arithmetic
    ADD = auto()
    SUB = auto()

    # Console I/O
    READ_INT = auto()
    PRINT = auto()


JUMP_OPS = (OpCode.IF_TRUE, OpCode.IF_NOT)


@dataclass
class Instruction:
    op: OpCode
    imm: Value = Value.NONE

    def __str__(self) -> str:
        text = str(self.imm)
        return f"{self.op.name} {text}" if text else self.op.name
