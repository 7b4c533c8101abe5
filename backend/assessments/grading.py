"""Scoring of submitted answers against question answer keys."""
from numbers import Number


def is_scored(question) -> bool:
    """A question counts toward the total only when it has options and a key."""
    options = _get(question, 'options')
    return bool(options) and _get(question, 'correct_index') is not None


def lookup_answer(answers, question_id):
    if not isinstance(answers, dict):
        return None
    if question_id in answers:
        return answers[question_id]
    return answers.get(str(question_id))


def is_correct(submitted, correct_index) -> bool:
    if isinstance(submitted, bool) or not isinstance(submitted, Number):
        return False
    return submitted == correct_index


def evaluate_answers(questions, answers):
    """Return ``(score, total)`` for ``answers`` keyed by question id.

    Open questions (no options or no correct index) never count toward the
    total. Missing, null or non-numeric answers to scored questions are
    simply wrong.
    """
    score = 0
    total = 0
    for question in questions:
        if not is_scored(question):
            continue
        total += 1
        submitted = lookup_answer(answers, _get(question, 'id'))
        if is_correct(submitted, _get(question, 'correct_index')):
            score += 1
    return score, total


def _get(question, field):
    if isinstance(question, dict):
        return question.get(field)
    return getattr(question, field, None)
