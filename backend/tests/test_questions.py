import random
from collections import Counter

from brainbrawl.services.games.questions import generate_question


def _evaluate(text):
    left, symbol, right = text.split(' ')
    left, right = int(left), int(right)
    return {'+': left + right, '-': left - right, '×': left * right}[symbol]


def test_generated_questions_are_well_formed():
    rng = random.Random(1234)
    positions = Counter()
    for _ in range(10000):
        q = generate_question(rng)
        assert len(q.answers) == 3
        assert len(set(q.answers)) == 3
        assert q.correct_position in (1, 2, 3)
        truth = _evaluate(q.text)
        assert q.correct_value == truth
        assert sum(1 for a in q.answers if a == truth) == 1
        assert all(abs(a - truth) <= 5 for a in q.answers)
        positions[q.correct_position] += 1
    # Expected ~3333 each; 300 is more than 6 standard deviations
    for pos in (1, 2, 3):
        assert abs(positions[pos] - 10000 / 3) < 300


def test_operands_stay_in_range():
    rng = random.Random(99)
    for _ in range(2000):
        left, _, right = generate_question(rng).text.split(' ')
        assert 1 <= int(left) <= 20
        assert 1 <= int(right) <= 20


def test_all_operators_are_used():
    rng = random.Random(5)
    symbols = {generate_question(rng).text.split(' ')[1] for _ in range(300)}
    assert symbols == {'+', '-', '×'}
