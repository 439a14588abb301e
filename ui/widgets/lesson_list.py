from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QTreeWidget, QTreeWidgetItem

_ROLE = Qt.UserRole


class LessonList(QTreeWidget):
    """Curriculum tree: one top-level item per level, lessons underneath."""

    lessonChosen = Signal(str, int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setHeaderHidden(True)
        self.setFocusPolicy(Qt.NoFocus)
        self.setMinimumWidth(200)
        self.itemClicked.connect(self._on_clicked)
        self._items = {}

    def populate(self, grouped):
        self.clear()
        self._items = {}
        for level, lessons in grouped.items():
            top = QTreeWidgetItem([level])
            top.setFlags(top.flags() & ~Qt.ItemIsSelectable)
            self.addTopLevelItem(top)
            for lesson in lessons:
                child = QTreeWidgetItem([lesson.title])
                child.setData(0, _ROLE, (lesson.level, lesson.index))
                top.addChild(child)
                self._items[(lesson.level, lesson.index)] = child
        self.expandAll()

    def highlight(self, level: str, index: int):
        item = self._items.get((level, index))
        if item is not None:
            self.setCurrentItem(item)

    def _on_clicked(self, item, _column):
        data = item.data(0, _ROLE)
        if data:
            level, index = data
            self.lessonChosen.emit(level, int(index))
