"""
Left panel – Folder (XX.XX) / Item (XX.XX.XX) tree.
Inline renaming (F2 or context menu) and delete requests go to the main window.
"""
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QTreeWidget, QTreeWidgetItem,
    QHeaderView, QMenu, QMessageBox, QPushButton
)
from PyQt6.QtCore import Qt, pyqtSignal
import qtawesome as qta

from jdex.logic.actions import EntityType
from jdex.utils import format_file_size

KIND_ROLE = Qt.ItemDataRole.UserRole
ID_ROLE = Qt.ItemDataRole.UserRole + 1
NAME_ROLE = Qt.ItemDataRole.UserRole + 2


def _kind(node):
    return EntityType(node.data(0, KIND_ROLE))


class IndexPanel(QWidget):
    new_folder_requested = pyqtSignal()
    new_item_requested = pyqtSignal(int)               # folder id
    rename_requested = pyqtSignal(object, int, str)    # kind, id, new name
    delete_requested = pyqtSignal(object, int)         # kind, id

    def __init__(self):
        super().__init__()
        self.setMinimumWidth(320)

        # Block signals during internal updates to prevent accidental triggers
        self._is_populating = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(15, 20, 10, 20)
        layout.setSpacing(10)

        # Header
        header_layout = QHBoxLayout()
        lbl = QLabel("INDEX")
        lbl.setObjectName("SubHeader")
        header_layout.addWidget(lbl)
        header_layout.addStretch()
        layout.addLayout(header_layout)

        # Toolbar
        btn_layout = QHBoxLayout()
        btn_layout.setSpacing(5)

        self.btn_add_folder = QPushButton()
        self.btn_add_folder.setIcon(qta.icon('fa5s.folder-plus', color='#198754'))
        self.btn_add_folder.setToolTip("New Folder")
        self.btn_add_folder.setFixedSize(28, 28)
        self.btn_add_folder.clicked.connect(self.new_folder_requested.emit)

        self.btn_add_item = QPushButton()
        self.btn_add_item.setIcon(qta.icon('fa5s.file-medical', color='#198754'))
        self.btn_add_item.setToolTip("New Item in Selected Folder")
        self.btn_add_item.setFixedSize(28, 28)
        self.btn_add_item.clicked.connect(self._add_item_btn)

        self.btn_del = QPushButton()
        self.btn_del.setIcon(qta.icon('fa5s.minus', color='#dc3545'))
        self.btn_del.setToolTip("Delete Selected")
        self.btn_del.setFixedSize(28, 28)
        self.btn_del.clicked.connect(lambda: self._delete(self.tree.currentItem()))

        btn_layout.addWidget(self.btn_add_folder)
        btn_layout.addWidget(self.btn_add_item)
        btn_layout.addWidget(self.btn_del)
        btn_layout.addStretch()
        layout.addLayout(btn_layout)

        # Tree
        self.tree = QTreeWidget()
        self.tree.setHeaderLabels(["Name", "Number", "Size"])
        self.tree.header().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        self.tree.header().setSectionResizeMode(1, QHeaderView.ResizeMode.ResizeToContents)
        self.tree.header().setSectionResizeMode(2, QHeaderView.ResizeMode.ResizeToContents)
        self.tree.header().setStretchLastSection(False)
        self.tree.setIndentation(20)
        self.tree.setRootIsDecorated(True)
        self.tree.setAlternatingRowColors(True)
        layout.addWidget(self.tree)

        # Signals
        self.tree.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.tree.customContextMenuRequested.connect(self._show_context_menu)
        self.tree.itemChanged.connect(self._on_item_changed)

    def populate(self, folders, items_by_folder):
        expanded = self._expanded_folder_ids()
        current = self.current_selection()

        self._is_populating = True  # Prevent itemChanged signals during load
        self.tree.clear()
        for folder in folders:
            node = self._make_node(self.tree, EntityType.FOLDER, folder, folder['folder_number'])
            node.setIcon(0, qta.icon('fa5s.folder', color='#FFC107'))
            for item in items_by_folder.get(folder['id'], []):
                child = self._make_node(node, EntityType.ITEM, item, item['item_number'])
                child.setText(2, format_file_size(item.get('file_size')))
                child.setIcon(0, qta.icon('fa5s.file', color='#6c757d'))
            node.setExpanded(folder['id'] in expanded)
        self._is_populating = False

        if current:
            self.select(*current)

    def _make_node(self, parent, kind, record, number):
        node = QTreeWidgetItem(parent)
        node.setText(0, record['name'])
        node.setText(1, number)
        node.setData(0, KIND_ROLE, kind.value)
        node.setData(0, ID_ROLE, record['id'])
        node.setData(0, NAME_ROLE, record['name'])  # Store original name
        node.setFlags(node.flags() | Qt.ItemFlag.ItemIsEditable)
        return node

    def _expanded_folder_ids(self):
        ids = set()
        for i in range(self.tree.topLevelItemCount()):
            node = self.tree.topLevelItem(i)
            if node.isExpanded():
                ids.add(node.data(0, ID_ROLE))
        return ids

    def _on_item_changed(self, node, column):
        """Called when user finishes editing a name."""
        if self._is_populating or column != 0:
            return
        new_name = node.text(0).strip()
        old_name = node.data(0, NAME_ROLE)
        if not new_name or new_name == old_name:
            return
        self.rename_requested.emit(_kind(node), node.data(0, ID_ROLE), new_name)

    # --- Actions ---
    def _add_item_btn(self):
        folder_id = self.current_folder_id()
        if folder_id is None:
            QMessageBox.information(self, "New Item", "Select a folder first.")
            return
        self.new_item_requested.emit(folder_id)

    def _show_context_menu(self, pos):
        node = self.tree.itemAt(pos)
        menu = QMenu()
        add_folder = menu.addAction(qta.icon('fa5s.folder-plus'), "New Folder")
        add_item = rename_action = delete_action = None

        if node:
            self.tree.setCurrentItem(node)
            add_item = menu.addAction(qta.icon('fa5s.file-medical'), "New Item")
            menu.addSeparator()
            rename_action = menu.addAction(qta.icon('fa5s.pen'), "Rename")
            delete_action = menu.addAction(qta.icon('fa5s.trash'), "Delete")

        action = menu.exec(self.tree.viewport().mapToGlobal(pos))

        if action == add_folder:
            self.new_folder_requested.emit()
        elif action is not None and action == add_item:
            self._add_item_btn()
        elif action is not None and action == rename_action:
            self.tree.editItem(node, 0)  # Trigger inline edit
        elif action is not None and action == delete_action:
            self._delete(node)

    def _delete(self, node):
        if node is None:
            return
        kind = _kind(node)
        reply = QMessageBox.question(
            self, "Delete",
            f"Delete {kind.value.lower()} '{node.text(1)} {node.text(0)}'?\n\nYou can undo this with Ctrl+Z.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.delete_requested.emit(kind, node.data(0, ID_ROLE))

    # API helpers
    def current_selection(self):
        node = self.tree.currentItem()
        if node is None:
            return None
        return _kind(node), node.data(0, ID_ROLE)

    def current_folder_id(self):
        node = self.tree.currentItem()
        if node is None:
            return None
        if _kind(node) is EntityType.ITEM:
            node = node.parent()
        return node.data(0, ID_ROLE)

    def select(self, kind, entity_id):
        for i in range(self.tree.topLevelItemCount()):
            folder = self.tree.topLevelItem(i)
            candidates = [folder] + [folder.child(j) for j in range(folder.childCount())]
            for node in candidates:
                if _kind(node) is kind and node.data(0, ID_ROLE) == entity_id:
                    self.tree.setCurrentItem(node)
                    return node
        return None

    def clear(self): self.tree.clear()
