"""
jdex/gui/entity_dialog.py
Form for a new folder or item.
"""
from PyQt6.QtWidgets import (
    QDialog, QFormLayout, QLineEdit, QComboBox, QSpinBox, QDialogButtonBox, QMessageBox
)

from jdex.logic.actions import EntityType

FOLDER_SENSITIVITIES = ["standard", "sensitive", "confidential"]
ITEM_SENSITIVITIES = ["inherit"] + FOLDER_SENSITIVITIES


class EntityDialog(QDialog):
    def __init__(self, kind: EntityType, number: str = "", parent=None):
        super().__init__(parent)
        self.kind = kind
        is_item = kind is EntityType.ITEM
        self.setWindowTitle("New Item" if is_item else "New Folder")
        self.setMinimumWidth(380)

        form = QFormLayout(self)
        self.number_edit = QLineEdit(number)
        self.number_edit.setPlaceholderText("XX.XX.XX" if is_item else "XX.XX")
        self.name_edit = QLineEdit()
        self.description_edit = QLineEdit()
        self.sensitivity_combo = QComboBox()
        self.sensitivity_combo.addItems(ITEM_SENSITIVITIES if is_item else FOLDER_SENSITIVITIES)
        self.location_edit = QLineEdit()

        form.addRow("Number:", self.number_edit)
        form.addRow("Name:", self.name_edit)
        form.addRow("Description:", self.description_edit)
        form.addRow("Sensitivity:", self.sensitivity_combo)
        form.addRow("Location:", self.location_edit)

        self.file_type_edit = None
        self.size_spin = None
        if is_item:
            self.file_type_edit = QLineEdit()
            self.file_type_edit.setPlaceholderText("pdf, docx, ...")
            self.size_spin = QSpinBox()
            self.size_spin.setRange(0, 2_000_000_000)
            self.size_spin.setSuffix(" bytes")
            form.addRow("File type:", self.file_type_edit)
            form.addRow("Size:", self.size_spin)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        form.addRow(buttons)

    def accept(self):
        if not self.number_edit.text().strip() or not self.name_edit.text().strip():
            QMessageBox.warning(self, self.windowTitle(), "Number and name are required.")
            return
        super().accept()

    def values(self) -> dict:
        data = {
            "name": self.name_edit.text().strip(),
            "description": self.description_edit.text().strip(),
            "sensitivity": self.sensitivity_combo.currentText(),
            "location": self.location_edit.text().strip(),
        }
        number = self.number_edit.text().strip()
        sequence = number.rsplit(".", 1)[-1]
        data["sequence"] = int(sequence) if sequence.isdigit() else None
        if self.kind is EntityType.ITEM:
            data["item_number"] = number
            data["file_type"] = self.file_type_edit.text().strip()
            data["file_size"] = self.size_spin.value() or None
        else:
            data["folder_number"] = number
            category = number.split(".", 1)[0]
            data["category_id"] = int(category) if category.isdigit() else None
        return data
