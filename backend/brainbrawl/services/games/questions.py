import random
import operator

from brainbrawl.models import Question

OPERAND_MIN = 1
OPERAND_MAX = 20
DECOY_SPREAD = 5

_OPERATIONS = [
    ('+', operator.add),
    ('-', operator.sub),
    ('×', operator.mul),
]


def generate_question(rng=random) -> Question:
    """Generate an arithmetic question with one correct and two decoy answers.

    Decoys are distinct values within +/-5 of the true result. The three
    values are shuffled and the 1-indexed position of the true result is
    reported alongside them.
    """
    left = rng.randint(OPERAND_MIN, OPERAND_MAX)
    right = rng.randint(OPERAND_MIN, OPERAND_MAX)
    symbol, apply = rng.choice(_OPERATIONS)
    result = apply(left, right)

    decoys = []
    while len(decoys) < 2:
        candidate = result + rng.randint(-DECOY_SPREAD, DECOY_SPREAD)
        if candidate != result and candidate not in decoys:
            decoys.append(candidate)

    answers = [result] + decoys
    rng.shuffle(answers)
    return Question(
        text=f"{left} {symbol} {right}",
        answers=tuple(answers),
        correct_position=answers.index(result) + 1,
    )
