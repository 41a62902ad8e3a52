from __future__ import annotations

"""ServiceMap UI – MoveVertexCommand

Undo/redo command for moving one :class:`~servicemap_project.src.ui.items.vertex_item.VertexItem`
of the transient shape.

Successive drags of the **same** vertex merge into a single entry on the
:class:`PySide6.QtGui.QUndoStack`.
"""

from PySide6.QtCore import QPointF
from PySide6.QtGui import QUndoCommand

from servicemap_project.src.ui.items.vertex_item import VertexItem

__all__ = ["MoveVertexCommand"]


class MoveVertexCommand(QUndoCommand):
    """One vertex drag.

    The drag has already happened when the command is pushed, so the first
    ``redo()`` is a no-op position-wise (``setPos`` to the current position).

    Args:
        vtx:     The :class:`VertexItem` being moved.
        old_pos: Position before the drag (parent coordinates).
        new_pos: Position after the drag (parent coordinates).
    """

    _CMD_ID = 0x5A11

    def __init__(self, vtx: VertexItem, old_pos: QPointF, new_pos: QPointF):
        super().__init__("Move vertex")
        self._vtx = vtx
        self._old = QPointF(old_pos)
        self._new = QPointF(new_pos)

    def undo(self):  # noqa: D401
        self._vtx.setPos(self._old)

    def redo(self):  # noqa: D401
        self._vtx.setPos(self._new)

    def mergeWith(self, other: QUndoCommand) -> bool:  # noqa: N802
        if isinstance(other, MoveVertexCommand) and other._vtx is self._vtx:
            self._new = QPointF(other._new)
            return True
        return False

    def id(self) -> int:  # noqa: N802 – Qt uses camelCase
        return self._CMD_ID
