"""Sequencing layer - identifier value generators and generation plans."""

from __future__ import annotations

from row_meta.sequencing.builder import (
    ValueGenerationPlanBuilder,
    build_generator,
    build_value_generation_plan,
)
from row_meta.sequencing.executor import (
    AssociationValueGeneratorExecutor,
    ColumnValueGeneratorExecutor,
)
from row_meta.sequencing.generators import IdentityGenerator, SequenceGenerator, UuidGenerator
from row_meta.sequencing.plan import (
    CompositeValueGenerationPlan,
    NoopValueGenerationPlan,
    SingleValueGenerationPlan,
    ValueGenerationPlan,
)

__all__ = [
    "ValueGenerationPlanBuilder",
    "build_value_generation_plan",
    "build_generator",
    "ColumnValueGeneratorExecutor",
    "AssociationValueGeneratorExecutor",
    "SequenceGenerator",
    "IdentityGenerator",
    "UuidGenerator",
    "ValueGenerationPlan",
    "NoopValueGenerationPlan",
    "SingleValueGenerationPlan",
    "CompositeValueGenerationPlan",
]
