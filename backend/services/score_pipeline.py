"""Ordered score transforms.

The assessor's raw score moves through a fixed chain of named transforms,
all on the 0-1 scale:

    weighted_components   base     sum of component score * weight
    penalty_compensation  comp     penalty *= (1 - reduction); score unchanged
    technical_mismatch    mult     score * (1 - penalty), capped on severe mismatch
    experience_mismatch   mult     score * (1 - penalty)
    semantic_adjustment   mult     score * (1 + (similarity - 0.5) * 2 * weight)
    clamp                 clamp    into [0, 1]

Each transform is a plain function that can be tested on its own; run()
applies them in order and records a ScoreStep for each one.
"""

from collections.abc import Callable
from dataclasses import dataclass

from models.schemas.assessment import ScoreStep

NEUTRAL_SIMILARITY = 0.5


@dataclass(frozen=True)
class ScoreTransform:
    name: str
    kind: str  # base | compensation | additive | multiplicative | clamp
    valid_range: tuple[float, float]  # accepted range of the transform's value
    apply: Callable[[float, float], float]

    def __call__(self, score: float, value: float) -> ScoreStep:
        lo, hi = self.valid_range
        if not lo <= value <= hi:
            raise ValueError(f"{self.name}: value {value} outside [{lo}, {hi}]")
        after = self.apply(score, value)
        return ScoreStep(name=self.name, kind=self.kind, value=value, before=score, after=after)


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------

def weighted_sum(components: dict[str, tuple[float, float]]) -> float:
    """Sum of score * weight over (score, weight) pairs."""
    return sum(score * weight for score, weight in components.values())


def apply_penalty(score: float, penalty: float) -> float:
    """Multiplicative deduction; penalty in [0, 1], higher never raises the score."""
    return score * (1.0 - penalty)


def similarity_adjustment(similarity: float, weight: float) -> float:
    """Signed adjustment in [-weight, +weight]; 0 for neutral similarity."""
    return (similarity - NEUTRAL_SIMILARITY) * 2.0 * weight


def apply_adjustment(score: float, adjustment: float) -> float:
    return score * (1.0 + adjustment)


def clamp_unit(score: float, _: float = 0.0) -> float:
    return max(0.0, min(1.0, score))


TECHNICAL_MISMATCH = ScoreTransform("technical_mismatch", "multiplicative", (0.0, 1.0), apply_penalty)
EXPERIENCE_MISMATCH = ScoreTransform("experience_mismatch", "multiplicative", (0.0, 1.0), apply_penalty)
SEMANTIC_ADJUSTMENT = ScoreTransform("semantic_adjustment", "multiplicative", (-1.0, 1.0), apply_adjustment)
CLAMP = ScoreTransform("clamp", "clamp", (0.0, 0.0), clamp_unit)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PipelineInputs:
    components: dict[str, tuple[float, float]]  # name -> (score, weight)
    technical_penalty: float = 0.0
    severe_mismatch: bool = False
    severe_score_cap: float = 1.0
    experience_penalty: float = 0.0
    technical_reduction: float = 0.0  # from penalty_compensation, in [0, 1]
    experience_reduction: float = 0.0
    similarity: float = NEUTRAL_SIMILARITY
    adjustment_weight: float = 0.2


def run(inputs: PipelineInputs) -> tuple[float, list[ScoreStep]]:
    """Apply every transform in order; returns (final 0-1 score, trace)."""
    steps: list[ScoreStep] = []

    base = weighted_sum(inputs.components)
    steps.append(ScoreStep(
        name="weighted_components", kind="base",
        value=sum(w for _, w in inputs.components.values()), before=0.0, after=base,
    ))
    score = base

    for reduction in (inputs.technical_reduction, inputs.experience_reduction):
        if not 0.0 <= reduction <= 1.0:
            raise ValueError(f"penalty_compensation: value {reduction} outside [0, 1]")
    technical_penalty = inputs.technical_penalty * (1.0 - inputs.technical_reduction)
    experience_penalty = inputs.experience_penalty * (1.0 - inputs.experience_reduction)
    steps.append(ScoreStep(
        name="penalty_compensation", kind="compensation",
        value=max(inputs.technical_reduction, inputs.experience_reduction),
        before=score, after=score,
    ))

    step = TECHNICAL_MISMATCH(score, technical_penalty)
    if inputs.severe_mismatch:
        step = step.model_copy(update={"after": min(step.after, inputs.severe_score_cap)})
    steps.append(step)
    score = step.after

    step = EXPERIENCE_MISMATCH(score, experience_penalty)
    steps.append(step)
    score = step.after

    similarity = clamp_unit(inputs.similarity)
    adjustment = similarity_adjustment(similarity, inputs.adjustment_weight)
    step = SEMANTIC_ADJUSTMENT(score, adjustment)
    steps.append(step)
    score = step.after

    step = CLAMP(score, 0.0)
    steps.append(step)
    return step.after, steps
