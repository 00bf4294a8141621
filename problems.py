from __future__ import annotations

import operator as _op
from enum import Enum
from typing import List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, model_validator


class Operator(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "×"
    DIV = "÷"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def precedence(self) -> int:
        # mul/div bind tighter than add/sub
        return 2 if self in (Operator.MUL, Operator.DIV) else 1

    def apply(self, a: int, b: int) -> int:
        return _APPLY[self](a, b)


_APPLY = {
    Operator.ADD: _op.add,
    Operator.SUB: _op.sub,
    Operator.MUL: _op.mul,
    Operator.DIV: _op.floordiv,
}


def _check_arity(operands: Sequence[int], operators: Sequence[Operator]) -> None:
    if len(operands) not in (2, 3) or len(operators) != len(operands) - 1:
        raise ValueError(
            f"expected 2 or 3 operands with one fewer operator, got "
            f"{len(operands)} operands and {len(operators)} operators"
        )


def evaluation_steps(
    operands: Sequence[int], operators: Sequence[Operator]
) -> List[Tuple[int, Operator, int, int]]:
    """
    Break an expression into (left, op, right, result) steps in evaluation order.

    Two operands: a single step. Three operands: if op1 binds looser than op2,
    the right pair goes first (a op1 (b op2 c)); otherwise strictly left-to-right.
    """
    _check_arity(operands, operators)
    if len(operands) == 2:
        a, b = operands
        return [(a, operators[0], b, operators[0].apply(a, b))]

    a, b, c = operands
    op1, op2 = operators
    if op1.precedence < op2.precedence:
        inner = op2.apply(b, c)
        return [(b, op2, c, inner), (a, op1, inner, op1.apply(a, inner))]
    inner = op1.apply(a, b)
    return [(a, op1, b, inner), (inner, op2, c, op2.apply(inner, c))]


def evaluate(operands: Sequence[int], operators: Sequence[Operator]) -> int:
    # Divisibility is enforced at generation time; a zero divisor raises here.
    return evaluation_steps(operands, operators)[-1][3]


def canonical_key(problem: "Problem") -> str:
    parts = [str(problem.operands[0])]
    for op, n in zip(problem.operators, problem.operands[1:]):
        parts.append(op.symbol)
        parts.append(str(n))
    return "".join(parts)


class Problem(BaseModel):
    """An immutable 2- or 3-operand arithmetic expression."""

    model_config = ConfigDict(frozen=True)

    operands: Tuple[int, ...]
    operators: Tuple[Operator, ...]

    @model_validator(mode="after")
    def _arity(self) -> "Problem":
        _check_arity(self.operands, self.operators)
        return self

    @classmethod
    def of(cls, *parts) -> "Problem":
        """Build from alternating operands and operators: ``Problem.of(7, "+", 3)``."""
        return cls(operands=parts[0::2], operators=parts[1::2])

    @property
    def key(self) -> str:
        return canonical_key(self)

    @property
    def correct_answer(self) -> int:
        return evaluate(self.operands, self.operators)

    @property
    def text(self) -> str:
        body = " ".join(
            [str(self.operands[0])]
            + [f"{op.symbol} {n}" for op, n in zip(self.operators, self.operands[1:])]
        )
        return f"{body} = ?"

    def solution_steps(self) -> List[str]:
        return [
            f"{left} {op.symbol} {right} = {result}"
            for left, op, right, result in evaluation_steps(self.operands, self.operators)
        ]

    def is_valid(self) -> bool:
        """
        True when every division step is exact (divisor non-zero and different
        from its dividend) and the final answer is positive.
        """
        for left, op, right in self._pending_steps():
            if op is Operator.DIV and (right == 0 or left == right or left % right != 0):
                return False
        return self.correct_answer > 0

    def _pending_steps(self) -> List[Tuple[int, Operator, int]]:
        # (left, op, right) per step in evaluation order; the second step's left
        # side is only computed when the first step can be evaluated safely.
        if len(self.operands) == 2:
            return [(self.operands[0], self.operators[0], self.operands[1])]

        a, b, c = self.operands
        op1, op2 = self.operators
        if op1.precedence < op2.precedence:
            first = (b, op2, c)
        else:
            first = (a, op1, b)
        if first[1] is Operator.DIV and (first[2] == 0 or first[0] % first[2] != 0):
            return [first]
        inner = first[1].apply(first[0], first[2])
        if op1.precedence < op2.precedence:
            return [first, (a, op1, inner)]
        return [first, (inner, op2, c)]
