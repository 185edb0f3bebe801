from __future__ import annotations
from typing import Dict, Iterator, List, Optional
from .bytecode import OpCode, Instruction, Value, JUMP_OPS


class Program:
    """Instruction list plus the name -> slot table for locals.

    Instructions are only ever appended; the one exception is `patch`, which
    rewrites the immediate of a jump once its target is known. Slots are
    handed out densely in declaration order and never reused.
    """

    def __init__(self):
        self.instructions: List[Instruction] = []
        self.local_index: Dict[str, int] = {}

    @property
    def num_locals(self) -> int:
        return len(self.local_index)

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def append(self, op: OpCode) -> int:
        return self.append_with_imm(op, Value.NONE)

    def append_with_imm(self, op: OpCode, imm: Value) -> int:
        # returns the instruction index, used for back-patching jumps
        self.instructions.append(Instruction(op, imm))
        return len(self.instructions) - 1

    def patch(self, index: int, imm: Value):
        self.instructions[index].imm = imm

    def lookup_local(self, name: str) -> Optional[int]:
        return self.local_index.get(name)

    def declare_local(self, name: str) -> int:
        assert name not in self.local_index, f"local {name!r} declared twice"
        idx = len(self.local_index)
        self.local_index[name] = idx
        return idx

    def disassemble(self) -> str:
        lines = []
        for pc, instr in enumerate(self.instructions):
            text = f"{pc:04d}  {instr}"
            if instr.op in JUMP_OPS:
                text += f"  ; -> {pc + instr.imm.as_int() + 1:04d}"
            lines.append(text)
        return "\n".join(lines)
