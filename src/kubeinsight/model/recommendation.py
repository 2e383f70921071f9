"""Cluster recommendation models."""

from .cost import Priority
from .snapshot import FrozenModel


class Recommendation(FrozenModel):
    """A prioritized, human-readable action for the operator."""

    type: str
    severity: Priority
    title: str
    description: str
    action: str
