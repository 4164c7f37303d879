"""Parse and evaluate arithmetic expressions safely."""
from collections.abc import Callable as ABCCallable
import math
import operator
import string
from typing import Callable, List, Optional, Tuple, Union

from arithmetic_calculator.common.config import MAX_EXPRESSION_LENGTH, RESULT_DECIMALS
from arithmetic_calculator.common.logger import logger
from arithmetic_calculator.common.operations import (
    ErrorKind,
    EvaluationFailure,
    EvaluationSuccess,
    Outcome,
)
from arithmetic_calculator.common.tokens import (
    LeftParen,
    NumberToken,
    OperatorToken,
    RightParen,
    Token,
)


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]

# Mapping of operator symbols to (precedence, function)
# math.fmod keeps the sign of the dividend, unlike the % operator on floats
OPERATORS: dict[str, Tuple[int, OperatorFn]] = {
    "+": (1, operator.add),
    "-": (1, operator.sub),
    "*": (2, operator.mul),
    "/": (2, operator.truediv),
    "%": (2, math.fmod),
}

# Operators whose right operand must not be zero
DIVISIONS: frozenset = frozenset({"/", "%"})

# Characters that may appear inside a number literal
NUMBER_CHARS: str = string.digits + "."


def _fail(kind: ErrorKind, message: str) -> EvaluationFailure:
    """Build a failure outcome and trace it."""
    logger.debug(f"🧮❌ {kind.value}: {message}")
    return EvaluationFailure(kind=kind, message=message)


class ExpressionParser:
    """
    Parse and evaluate arithmetic expressions safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - Every stage returns an EvaluationFailure instead of raising on bad input

    Algorithm:
        1. Tokenize character by character (numbers, operators, parentheses)
        2. Convert to Reverse Polish Notation (RPN) using Shunting-yard
        3. Evaluate RPN using a stack

    Examples:
        - Infix expression (standard notation): 3 + 4 * (2 - 1)
        - Corresponding Reverse Polish Notation (RPN): 3 4 2 1 - * +
    """

    @staticmethod
    def _is_unary_position(tokens: List[Token]) -> bool:
        """A minus sign here starts a negative literal rather than a subtraction."""
        return not tokens or isinstance(tokens[-1], (OperatorToken, LeftParen))

    @staticmethod
    def tokenize(expr: str) -> Union[List[Token], EvaluationFailure]:
        """
        Split an arithmetic expression into tokens.

        Whitespace is ignored. A "-" at the start of the input, after an operator
        or after "(" is folded into the number literal that follows it.

        :param str expr: Arithmetic expression as a string

        :return: List of tokens, or the failure that stopped tokenizing
        :rtype: Union[List[Token], EvaluationFailure]
        """
        tokens: List[Token] = []
        length: int = len(expr)
        i: int = 0

        while i < length:
            char: str = expr[i]
            following: str = expr[i + 1] if i + 1 < length else ""

            if char.isspace():
                i += 1
                continue

            negative_literal: bool = (
                char == "-"
                and following != ""
                and following in NUMBER_CHARS
                and ExpressionParser._is_unary_position(tokens)
            )

            if char in NUMBER_CHARS or negative_literal:
                start: int = i
                # Consume the sign or first character, then the maximal run
                i += 1
                while i < length and expr[i] in NUMBER_CHARS:
                    i += 1
                literal: str = expr[start:i]
                body: str = literal.lstrip("-")
                if body.count(".") > 1 or body == ".":
                    return _fail(ErrorKind.INVALID_NUMBER, f"Invalid number {literal!r} at position {start}")
                value: float = float(literal)
                if not math.isfinite(value):
                    return _fail(ErrorKind.INVALID_NUMBER, f"Number at position {start} is too large")
                tokens.append(NumberToken(value=value))
            elif char in OPERATORS:
                tokens.append(OperatorToken(symbol=char))
                i += 1
            elif char == "(":
                tokens.append(LeftParen())
                i += 1
            elif char == ")":
                tokens.append(RightParen())
                i += 1
            else:
                return _fail(ErrorKind.UNEXPECTED_CHARACTER, f"Unexpected character {char!r} at position {i}")

        return tokens

    @staticmethod
    def to_rpn(tokens: List[Token]) -> Union[List[Token], EvaluationFailure]:
        """
        Convert a list of tokens into Reverse Polish Notation (RPN) using the Shunting-yard algorithm.

        All operators are left-associative, so an operator on the stack with equal
        precedence is popped before the incoming one is pushed. Operand counts are
        not checked here.

        :param List[Token] tokens: List of arithmetic tokens

        :return: List of tokens in RPN order, or a MismatchedParentheses failure
        :rtype: Union[List[Token], EvaluationFailure]
        """
        output: List[Token] = []
        stack: List[Token] = []

        for token in tokens:
            if isinstance(token, NumberToken):
                # Numbers are added directly to the output
                output.append(token)
            elif isinstance(token, OperatorToken):
                # Operator: pop operators from stack with higher or equal precedence
                prec: int = OPERATORS[token.symbol][0]
                while (
                    stack
                    and isinstance(stack[-1], OperatorToken)
                    and OPERATORS[stack[-1].symbol][0] >= prec
                ):
                    output.append(stack.pop())
                stack.append(token)
            elif isinstance(token, LeftParen):
                stack.append(token)
            else:
                # Closing parenthesis: unwind to the matching "("
                while stack and not isinstance(stack[-1], LeftParen):
                    output.append(stack.pop())
                if not stack:
                    return _fail(ErrorKind.MISMATCHED_PARENTHESES, "Unmatched ')'")
                stack.pop()

        # Append remaining operators in reverse order (stack top first)
        while stack:
            token = stack.pop()
            if isinstance(token, (LeftParen, RightParen)):
                return _fail(ErrorKind.MISMATCHED_PARENTHESES, "Unmatched '('")
            output.append(token)

        return output

    @staticmethod
    def check_order(tokens: List[Token]) -> Optional[EvaluationFailure]:
        """
        Check that operands and operators alternate the way infix notation requires.

        Shunting-yard happily reorders prefix ("+ 3 4") or postfix ("3 4 +")
        input into valid RPN, so the infix order is checked on the tokens.

        :param List[Token] tokens: Tokens in input order

        :return: An InvalidExpression failure, or None if the order is valid
        :rtype: Optional[EvaluationFailure]
        """
        previous: Optional[Token] = None
        for position, token in enumerate(tokens):
            if isinstance(token, (NumberToken, LeftParen)):
                if isinstance(previous, (NumberToken, RightParen)):
                    return _fail(ErrorKind.INVALID_EXPRESSION, f"Missing operator before token {position + 1}")
            elif previous is None or isinstance(previous, (OperatorToken, LeftParen)):
                return _fail(ErrorKind.INVALID_EXPRESSION, f"Missing operand before token {position + 1}")
            previous = token

        if isinstance(previous, OperatorToken):
            return _fail(ErrorKind.INVALID_EXPRESSION, f"Expression cannot end with operator {previous.symbol!r}")
        return None

    @staticmethod
    def _round_result(value: float) -> float:
        """Strip binary floating-point noise from non-integer results."""
        if value.is_integer():
            return value
        return round(value, RESULT_DECIMALS)

    @staticmethod
    def evaluate_rpn(rpn: List[Token]) -> Outcome:
        """
        Reduce a token sequence in RPN order to a single value.

        :param List[Token] rpn: Tokens in RPN order

        :return: The computed value, or the failure that stopped evaluation
        :rtype: Outcome
        """
        stack: List[float] = []

        for token in rpn:
            if isinstance(token, NumberToken):
                stack.append(token.value)
                continue

            if not isinstance(token, OperatorToken):
                return _fail(ErrorKind.INVALID_EXPRESSION, f"Unexpected {token.kind} token in RPN sequence")

            # Operator requires two operands
            if len(stack) < 2:
                return _fail(ErrorKind.INVALID_EXPRESSION, f"Not enough operands for {token.symbol!r}")
            b: float = stack.pop()
            a: float = stack.pop()

            if token.symbol in DIVISIONS and b == 0:
                return _fail(ErrorKind.DIVISION_BY_ZERO, f"Division by zero in {a:g} {token.symbol} {b:g}")

            stack.append(OPERATORS[token.symbol][1](a, b))

        if len(stack) != 1:
            return _fail(ErrorKind.INVALID_EXPRESSION, f"Expected one result, {len(stack)} values remain")

        if not math.isfinite(stack[0]):
            return _fail(ErrorKind.EVALUATION_ERROR, f"Result out of range: {stack[0]}")

        return EvaluationSuccess(value=ExpressionParser._round_result(stack[0]))

    @staticmethod
    def evaluate(expr: str) -> Outcome:
        """
        Evaluate an arithmetic expression safely.

        Never raises: malformed input yields an EvaluationFailure, and any
        unexpected fault is reported as ErrorKind.EVALUATION_ERROR.

        :param str expr: Arithmetic expression string

        :return: Computed result or failure
        :rtype: Outcome
        """
        try:
            if len(expr) > MAX_EXPRESSION_LENGTH:
                return _fail(
                    ErrorKind.INVALID_EXPRESSION,
                    f"Expression exceeds {MAX_EXPRESSION_LENGTH} characters",
                )
            if not expr.strip():
                return _fail(ErrorKind.INVALID_EXPRESSION, "Empty expression")

            tokens = ExpressionParser.tokenize(expr)
            if isinstance(tokens, EvaluationFailure):
                return tokens

            rpn = ExpressionParser.to_rpn(tokens)
            if isinstance(rpn, EvaluationFailure):
                return rpn

            # Parentheses are reported first, so ")(" stays a parenthesis error
            misplaced = ExpressionParser.check_order(tokens)
            if misplaced is not None:
                return misplaced

            return ExpressionParser.evaluate_rpn(rpn)

        except Exception as exc:
            logger.exception(f"💥 Unexpected fault while evaluating {expr!r}")
            return EvaluationFailure(
                kind=ErrorKind.EVALUATION_ERROR,
                message=str(exc) or type(exc).__name__,
            )


def evaluate(expr: str) -> Outcome:
    """Evaluate ``expr``; shorthand for :meth:`ExpressionParser.evaluate`."""
    return ExpressionParser.evaluate(expr)
