"""Migration source generators."""

from .defaults import DefaultNormalizer
from .emitter import TableEmitter
from .indexes import ClassifiedIndexes, IndexClassifier
from .migration import MigrationGenerator
from .renderer import MigrationRenderer
from .type_mapping import TYPE_MAP, TypeMapper

__all__ = [
    "ClassifiedIndexes",
    "DefaultNormalizer",
    "IndexClassifier",
    "MigrationGenerator",
    "MigrationRenderer",
    "TableEmitter",
    "TYPE_MAP",
    "TypeMapper",
]
