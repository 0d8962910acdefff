"""Read-side statistics over stored results."""
import math
from collections import namedtuple

ExamSummary = namedtuple("ExamSummary", ["count", "average", "maximum", "top_result"])


def round_half_up(value):
    return int(math.floor(value + 0.5))


def percentage(correct, total):
    if not total:
        return 0
    return round_half_up(correct / total * 100)


def summarize(results, total_questions):
    """
    Average, best percentage and top scorer for one exam.

    ``results`` must be in insertion order; on a tie the earliest result
    holding the maximum is the top scorer.
    """
    results = list(results)
    if not results:
        return ExamSummary(0, 0, 0, None)

    percentages = [percentage(r.score, total_questions) for r in results]
    maximum = max(percentages)
    top_result = results[percentages.index(maximum)]
    average = round_half_up(sum(percentages) / len(percentages))
    return ExamSummary(len(results), average, maximum, top_result)
