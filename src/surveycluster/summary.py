"""
Cluster attribute summaries for survey results.

Tallies multiple-choice answers of a cluster's surveys into the flat record
a map layer uses for chart symbols and popups:

    {"id": 3, "count": 5, "average": 1.4, "q0c0": 2, "q0c1": 3, ...}

q{i}c{j} counts answers to question i with choice j (domain order).
"average" is the mean choice index of the averaging question.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from .models import Cluster

MULTIPLE_CHOICE_STYLES = ("button", "list", "dropdown")


@dataclass
class SurveyQuestion:
    """A multiple-choice survey question bound to a feature attribute."""

    field: str
    question: str
    domain: list[str]

    def choice_index(self, answer) -> Optional[int]:
        """Position of an answer in the domain, or None if not a choice."""
        # Numeric-coded answers arrive as doubles; 2.0 must match "2"
        if isinstance(answer, float) and answer.is_integer():
            answer = int(answer)
        try:
            return self.domain.index(str(answer))
        except ValueError:
            return None


def parse_survey_questions(definition: Iterable[dict]) -> list[SurveyQuestion]:
    """
    Extract multiple-choice questions from a survey definition.

    Each entry is a dict with "question", "field", "style" and, for
    multiple-choice styles, a "|"-separated "domain". Other styles are skipped.
    """
    questions = []
    for item in definition:
        if item.get("style") not in MULTIPLE_CHOICE_STYLES:
            continue
        domain = (item.get("domain") or "").split("|")
        questions.append(SurveyQuestion(
            field=item["field"],
            question=item.get("question", ""),
            domain=domain,
        ))
    return questions


def summarize_cluster(
    cluster: Cluster,
    questions: list[SurveyQuestion],
    averaging_field: Optional[str] = None,
) -> dict:
    """
    Summarize a cluster's survey answers.

    Args:
        cluster: Cluster to summarize
        questions: Multiple-choice questions to tally
        averaging_field: Field whose choice index is averaged

    Returns:
        Dict with id, count, average (NaN if nobody answered) and q{i}c{j} counts
    """
    summary = {"id": cluster.id}
    for i, question in enumerate(questions):
        for j in range(len(question.domain)):
            summary[f"q{i}c{j}"] = 0

    num_scores = 0
    score_sum = 0
    for feature in cluster.features:
        for i, question in enumerate(questions):
            answer = feature.attributes.get(question.field)
            if answer is None or isinstance(answer, (dict, list, tuple)):
                continue
            choice = question.choice_index(answer)
            if choice is None:
                continue

            summary[f"q{i}c{choice}"] += 1
            if question.field == averaging_field:
                num_scores += 1
                score_sum += choice

    summary["average"] = score_sum / num_scores if num_scores else math.nan
    summary["count"] = cluster.size
    return summary


def summarize_clusters(
    clusters: Iterable[Cluster],
    questions: list[SurveyQuestion],
    averaging_field: Optional[str] = None,
) -> list[dict]:
    return [summarize_cluster(c, questions, averaging_field) for c in clusters]


def size_ratio(cluster: Cluster, max_size: int) -> float:
    """Cluster size relative to the largest cluster (0 when max_size is 0)."""
    if max_size <= 0:
        return 0.0
    return cluster.size / max_size
