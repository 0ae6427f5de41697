"""Ventana principal de la aplicación."""

from __future__ import annotations

from dataclasses import dataclass

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from directorio_usuarios.core.errors import InvalidConfiguration
from directorio_usuarios.core.facade import UserFacade
from directorio_usuarios.core.view_model import ViewModel
from directorio_usuarios.models.user import User


@dataclass(slots=True)
class _TableColumns:
    genero: int = 0
    nombre: int = 1
    apellido: int = 2


class MainWindow(QMainWindow):
    """Ventana principal con el listado paginado de usuarios."""

    def __init__(self, *, facade: UserFacade) -> None:
        super().__init__()
        self.facade = facade
        self._columns = _TableColumns()
        self._ultimo_vm: ViewModel | None = None

        self.setWindowTitle("Directorio de usuarios")
        self.resize(640, 400)

        # Se llena con el criterio vigente sin disparar una búsqueda:
        # ``textEdited`` solo se emite por edición del usuario.
        self.search_box = QLineEdit(placeholderText="Semilla de búsqueda")
        self.search_box.setText(self.facade.snapshot().criteria)
        self.search_box.textEdited.connect(self.facade.submit_search_text)

        self.refresh_button = QPushButton("Recargar")
        self.refresh_button.clicked.connect(self.facade.reload)

        self.page_size_button = QPushButton("Tamaño de página")
        self.page_size_button.clicked.connect(self._on_show_page_sizes)

        self.prev_button = QPushButton("Anterior")
        self.prev_button.clicked.connect(lambda: self._on_change_page(-1))
        self.next_button = QPushButton("Siguiente")
        self.next_button.clicked.connect(lambda: self._on_change_page(1))

        self.size_buttons: dict[int, QPushButton] = {}
        sizes_bar = QHBoxLayout()
        for size in self.facade.snapshot().pagination.page_sizes:
            button = QPushButton(str(size))
            button.setCheckable(True)
            button.setVisible(False)
            button.clicked.connect(lambda _checked=False, s=size: self._on_select_size(s))
            self.size_buttons[size] = button
            sizes_bar.addWidget(button)
        sizes_bar.addStretch(1)

        self.status_label = QLabel("")
        self.page_label = QLabel("")

        self.table = QTableWidget(columnCount=3)
        self.table.setHorizontalHeaderLabels(["Género", "Nombre", "Apellido"])
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.verticalHeader().setVisible(False)
        self.table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)

        top_bar = QHBoxLayout()
        top_bar.addWidget(QLabel("Usuarios"))
        top_bar.addStretch(1)
        top_bar.addWidget(self.search_box)
        top_bar.addWidget(self.refresh_button)

        nav_bar = QHBoxLayout()
        nav_bar.addWidget(self.page_size_button)
        nav_bar.addLayout(sizes_bar)
        nav_bar.addWidget(self.prev_button)
        nav_bar.addWidget(self.page_label)
        nav_bar.addWidget(self.next_button)

        layout = QVBoxLayout()
        layout.addLayout(top_bar)
        layout.addLayout(nav_bar)
        layout.addWidget(self.table)
        layout.addWidget(self.status_label)

        container = QWidget()
        container.setLayout(layout)
        self.setCentralWidget(container)

        self._subscription = self.facade.view_model.subscribe(self._render)

    # ------------------------------------------------------------------
    # Eventos y acciones
    # ------------------------------------------------------------------
    def _on_show_page_sizes(self) -> None:
        self.page_size_button.setVisible(False)
        for button in self.size_buttons.values():
            button.setVisible(True)

    def _on_select_size(self, size: int) -> None:
        self._seleccionar(size, 0)

    def _on_change_page(self, delta: int) -> None:
        if self._ultimo_vm is None:
            return
        paginacion = self._ultimo_vm.pagination
        self._seleccionar(paginacion.selected_size, max(0, paginacion.current_page + delta))

    def _seleccionar(self, size: int, page: int) -> None:
        try:
            self.facade.select_page_size(size, page)
        except InvalidConfiguration as exc:  # pragma: no cover - UI
            QMessageBox.warning(self, "Paginación", str(exc))

    # ------------------------------------------------------------------
    # Renderizado
    # ------------------------------------------------------------------
    def _render(self, vm: ViewModel) -> None:
        self._ultimo_vm = vm
        paginacion = vm.pagination

        for size, button in self.size_buttons.items():
            button.setChecked(size == paginacion.selected_size)
        self.page_label.setText(f"Página {paginacion.current_page + 1}")
        self.prev_button.setEnabled(paginacion.current_page > 0 and not vm.loading)
        self.next_button.setEnabled(not vm.loading)

        if vm.loading:
            self.status_label.setText("Cargando usuarios...")
        elif vm.error:
            self.status_label.setText(vm.error)
        else:
            self.status_label.setText(f"{len(vm.users)} usuarios")

        self._populate_table(vm.users)

    def _populate_table(self, usuarios: tuple[User, ...]) -> None:
        self.table.setRowCount(len(usuarios))

        for row, usuario in enumerate(usuarios):
            celdas = (
                (self._columns.genero, usuario.gender),
                (self._columns.nombre, usuario.name.first),
                (self._columns.apellido, usuario.name.last),
            )
            for column, texto in celdas:
                item = QTableWidgetItem(texto)
                item.setFlags(item.flags() ^ Qt.ItemFlag.ItemIsEditable)
                self.table.setItem(row, column, item)

        self.table.resizeColumnsToContents()


__all__ = ["MainWindow"]
