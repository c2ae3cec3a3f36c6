"""Model writers (run after resolution completes)."""

from .base import ModelWriter, NullModelWriter
from .graphviz_writer import GraphvizModelWriter, model_to_graphviz

__all__ = ["ModelWriter", "NullModelWriter", "GraphvizModelWriter", "model_to_graphviz"]
