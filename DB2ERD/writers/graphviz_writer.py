"""Graphviz model writer - lays out a resolved ER data model as a diagram.

Layout:
- Entity = table-like node listing its columns (PK / FK / UQ markers, type)
- Relationship = edge from the referencing entity to the referenced entity,
  labelled with the constraint name and the participating columns
- Cardinalities at both edge endpoints
"""

from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Dict, List, Optional

from graphviz import Digraph

from DB2ERD.ir.models import ERDColumn, ERDDataModel, ERDEntity
from DB2ERD.utils.logging import get_logger

logger = get_logger(__name__)

SUPPORTED_FORMATS = ("svg", "png", "jpg", "pdf")


# ---- Helper functions ----

def _eid(entity: ERDEntity, index: int) -> str:
    """Generate entity node ID (entities may share a name when rows were not contiguous)."""
    return f"E_{index}_{entity.name}"


def _column_markers(column: ERDColumn) -> str:
    markers: List[str] = []
    if column.primary_key:
        markers.append("PK")
    if column.foreign_key:
        markers.append("FK")
    if column.unique and not column.primary_key:
        markers.append("UQ")
    return ",".join(markers)


def _column_type(column: ERDColumn) -> str:
    if column.length:
        return f"{column.type}({column.length})"
    return column.type


def _entity_label(entity: ERDEntity) -> str:
    """HTML-like label: header row with the entity name, one row per column."""
    rows = [
        f'<TR><TD COLSPAN="3" BGCOLOR="lightgrey"><B>{escape(entity.name)}</B></TD></TR>'
    ]
    for column in entity.columns:
        name = escape(column.name)
        if column.primary_key:
            name = f"<U>{name}</U>"
        rows.append(
            "<TR>"
            f'<TD ALIGN="LEFT">{escape(_column_markers(column))}</TD>'
            f'<TD ALIGN="LEFT">{name}</TD>'
            f'<TD ALIGN="LEFT">{escape(_column_type(column))}</TD>'
            "</TR>"
        )
    return '<<TABLE BORDER="0" CELLBORDER="1" CELLSPACING="0" CELLPADDING="4">' + "".join(rows) + "</TABLE>>"


# ---- Main compiler ----

def model_to_graphviz(model: ERDDataModel) -> Digraph:
    """Compile an ERDDataModel into a Graphviz Digraph.
    
    Args:
        model: Resolved ER data model
        
    Returns:
        Graphviz Digraph ready for rendering
    """
    g = Digraph(
        "ERD",
        graph_attr={
            "rankdir": "LR",
            "nodesep": "0.6",
            "ranksep": "1.0",
            "pad": "0.25",
            "label": model.name,
            "labelloc": "t",
        },
    )
    g.attr("node", shape="plaintext", fontname="Helvetica", fontsize="11")
    g.attr("edge", fontname="Helvetica", fontsize="10")

    node_ids: Dict[int, str] = {}
    for index, entity in enumerate(model.entities):
        node_ids[id(entity)] = _eid(entity, index)
        g.node(node_ids[id(entity)], _entity_label(entity))

    for relationship in model.iter_relationships():
        source = node_ids.get(id(relationship.end2.reference))
        target = node_ids.get(id(relationship.end1.reference))
        if source is None or target is None:
            # Target entity belongs to another model
            logger.warning(f"Relationship '{relationship.name}' points outside the model; skipped")
            continue
        g.edge(
            source,
            target,
            label=f"{relationship.name}\n({relationship.end2.name})",
            taillabel=relationship.end2.cardinality,
            headlabel=relationship.end1.cardinality,
            arrowhead="tee",
            arrowtail="crow",
            dir="both",
        )

    return g


class GraphvizModelWriter:
    """Writes the model as Graphviz source and, optionally, a rendered image.
    
    Rendering needs the Graphviz ``dot`` executable; writing the ``.gv``
    source does not.
    """

    def __init__(
        self,
        output_path: Optional[str] = None,
        format: str = "svg",
        render: bool = False,
        cleanup: bool = True,
    ):
        if format not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported format '{format}'. Use one of {SUPPORTED_FORMATS}")
        self.output_path = output_path
        self.format = format
        self.render = render
        self.cleanup = cleanup
        self.graph: Optional[Digraph] = None
        self.written_path: Optional[str] = None

    def generate_model(self, model: ERDDataModel) -> None:
        self.graph = model_to_graphviz(model)
        logger.info(
            f"Laid out {len(model.entities)} entities and "
            f"{sum(1 for _ in model.iter_relationships())} relationships"
        )
        if not self.output_path:
            return

        Path(self.output_path).parent.mkdir(parents=True, exist_ok=True)
        if self.render:
            self.written_path = self.graph.render(self.output_path, format=self.format, cleanup=self.cleanup)
        else:
            self.written_path = self.graph.save(self.output_path)
        logger.info(f"ER diagram written to {self.written_path}")

    @property
    def source(self) -> str:
        return self.graph.source if self.graph is not None else ""
