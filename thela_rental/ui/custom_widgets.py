from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QSizePolicy
from qfluentwidgets import LineEdit, ScrollArea, TableWidget, setCustomStyleSheet


# Custom LineEdit for the rental form: Enter/Down moves to the next field, Up to the previous one
class CustomLineEdit(LineEdit):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        self.next_widget_on_enter = None # For Enter/Return key
        self.up_widget = None
        self.down_widget = None

    def keyPressEvent(self, event):
        key = event.key()

        target_widget = None
        if key == Qt.Key_Up:
            target_widget = self.up_widget
        elif key == Qt.Key_Down:
            target_widget = self.down_widget
        elif key in (Qt.Key_Return, Qt.Key_Enter):
            target_widget = self.next_widget_on_enter

        if target_widget:
            target_widget.setFocus()
            event.accept()
            return

        super().keyPressEvent(event)

    def focusInEvent(self, event):
        super().focusInEvent(event)
        # Ensure that this widget is visible within its parent ScrollArea
        parent = self.parent()
        while parent and not isinstance(parent, ScrollArea):
            parent = parent.parent()
        if parent:
            parent.ensureWidgetVisible(self)


def link_fields(fields):
    """Chain CustomLineEdits so Enter/Down and Up walk through them in order."""
    for i, field in enumerate(fields):
        if not isinstance(field, CustomLineEdit):
            continue
        if i + 1 < len(fields):
            field.next_widget_on_enter = fields[i + 1]
            field.down_widget = fields[i + 1]
        if i > 0:
            field.up_widget = fields[i - 1]


def style_fluent_table(table: TableWidget) -> None:
    """Apply Fluent-compatible styling, alternate rows and header tweaks."""
    table.setShowGrid(False)
    table.setAlternatingRowColors(True)
    table.verticalHeader().setVisible(False)
    table.horizontalHeader().setHighlightSections(False)
    table.setBorderVisible(True)
    table.setBorderRadius(8)
    table.verticalHeader().setDefaultSectionSize(40)

    light_qss = """
        QTableWidget {
            background-color: #ffffff;
            color: #212121;
            selection-background-color: #1976d2;
            alternate-background-color: #f8f9fa;
            border: 2px solid #d0d7de;
            border-radius: 12px;
        }
        QHeaderView::section {
            background: #f6f8fa;
            color: #24292f;
            font-weight: 700;
            border: none;
            border-bottom: 2px solid #d0d7de;
            padding: 10px 12px;
        }
    """
    dark_qss = """
        QTableWidget {
            background-color: #21262d;
            color: #f0f6fc;
            selection-background-color: #0969da;
            alternate-background-color: #161b22;
            border: 2px solid #30363d;
            border-radius: 12px;
        }
        QHeaderView::section {
            background: #30363d;
            color: #f0f6fc;
            font-weight: 700;
            border: none;
            border-bottom: 2px solid #30363d;
            padding: 10px 12px;
        }
    """
    setCustomStyleSheet(table, light_qss, dark_qss)
