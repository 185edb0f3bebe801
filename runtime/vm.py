from __future__ import annotations
import re
import sys
from typing import Callable, List, Optional
from compiler.bytecode import OpCode, Value, ValueKindError
from compiler.program import Program

INT64_MIN = -2**63
INT64_MAX = 2**63 - 1

READ_INT_PROMPT = "Input an integer value:\n> "
INT_INPUT = re.compile(r"[+-]?[0-9]+")


def wrap_i64(n: int) -> int:
    """Two's complement wraparound to a signed 64-bit integer."""
    n &= 0xFFFFFFFFFFFFFFFF
    return n - 2**64 if n > INT64_MAX else n


class RunError(RuntimeError):
    def __init__(self, message: str, pc: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.pc = pc

    def __str__(self) -> str:
        if self.pc is None:
            return self.message
        return f"{self.message} (pc={self.pc:04d})"


class WeeVM:
    def __init__(
        self,
        program: Program,
        output_callback: Optional[Callable[[str], None]] = None,
        input_callback: Optional[Callable[[], str]] = None,
    ):
        self.program = program
        self._output_callback = output_callback
        self._input_callback = input_callback or sys.stdin.readline

        self.stack: List[Value] = []            # operand stack
        self.locals: List[Value] = []           # one slot per declared variable
        self.pc: int = 0

    def _output(self, text: str):
        """Output text via callback or print."""
        if self._output_callback:
            self._output_callback(text)
        else:
            print(text, end="", flush=True)

    def _push_int(self, n: int):
        self.stack.append(Value.of_int(n))

    def _pop(self) -> Value:
        if not self.stack:
            raise RunError("stack underflow", self.pc)
        return self.stack.pop()

    def _pop_int(self) -> int:
        return self._pop().as_int()

    def _slot(self, imm: Value) -> int:
        idx = imm.as_slot()
        if idx < 0 or idx >= len(self.locals):
            raise RunError(f"invalid local slot {idx}", self.pc)
        return idx

    def _read_int(self) -> int:
        self._output(READ_INT_PROMPT)
        line = self._input_callback()
        if not line:
            raise RunError("unexpected end of input", self.pc)
        text = line.strip()
        # ASCII decimal digits only
        if not INT_INPUT.fullmatch(text):
            raise RunError(f"invalid integer input: {text!r}", self.pc)
        n = int(text)
        if not INT64_MIN <= n <= INT64_MAX:
            raise RunError(f"integer input out of range: {text}", self.pc)
        return n

    def _jump(self, offset: int):
        # self.pc already points past the jump instruction
        target = self.pc + offset
        if target < 0 or target > len(self.program):
            raise RunError(f"invalid jump target {target}", self.pc - 1)
        self.pc = target

    def run(self):
        self.stack = []
        self.locals = [Value.NONE] * self.program.num_locals
        self.pc = 0
        try:
            self._run()
        except ValueKindError as e:
            # only reachable through a malformed program
            raise RunError(str(e), self.pc) from e

    def _run(self):
        code = self.program.instructions
        while self.pc < len(code):
            instr = code[self.pc]
            op = instr.op
            imm = instr.imm

            if op is OpCode.EXIT:
                return

            elif op is OpCode.ERROR:
                raise RunError("run-time error", self.pc)

            elif op is OpCode.PUSH:
                self.stack.append(imm)

            elif op is OpCode.GET_LOCAL:
                self.stack.append(self.locals[self._slot(imm)])

            elif op is OpCode.SET_LOCAL:
                val = self._pop()
                self.locals[self._slot(imm)] = val

            elif op in (OpCode.EQUAL, OpCode.LESS_THAN, OpCode.ADD, OpCode.SUB):
                b = self._pop_int(); a = self._pop_int()
                if op is OpCode.EQUAL:
                    res = int(a == b)
                elif op is OpCode.LESS_THAN:
                    res = int(a < b)
                elif op is OpCode.ADD:
                    res = wrap_i64(a + b)
                else:  # SUB
                    res = wrap_i64(a - b)
                self._push_int(res)

            elif op is OpCode.IF_TRUE:
                v = self._pop_int()
                self.pc += 1
                if v != 0:
                    self._jump(imm.as_int())
                continue

            elif op is OpCode.IF_NOT:
                v = self._pop_int()
                self.pc += 1
                if v == 0:
                    self._jump(imm.as_int())
                continue

            elif op is OpCode.READ_INT:
                self._push_int(self._read_int())

            elif op is OpCode.PRINT:
                v = self._pop_int()
                self._output(f"print: {v}\n")

            else:
                raise RunError(f"Unknown opcode {op}", self.pc)

            self.pc += 1

        # fell off the end


def run_program(
    program: Program,
    output_callback: Optional[Callable[[str], None]] = None,
    input_callback: Optional[Callable[[], str]] = None,
) -> WeeVM:
    vm = WeeVM(program, output_callback, input_callback)
    vm.run()
    return vm
