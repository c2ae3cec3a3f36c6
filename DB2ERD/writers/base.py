"""Model writer interface: consumes a finished ER data model."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from DB2ERD.ir.models import ERDDataModel


@runtime_checkable
class ModelWriter(Protocol):
    def generate_model(self, model: ERDDataModel) -> None:
        ...


class NullModelWriter:
    """Writer that leaves the model as it is."""

    def generate_model(self, model: ERDDataModel) -> None:
        return None
