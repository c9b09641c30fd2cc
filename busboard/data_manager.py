# busboard/data_manager.py
# Implements the façade the UI talks to: picks the configured BaseRepo, keeps the list currently on screen,
# validates input before the store is touched, allows one change at a time, and turns failures into {success, message} results.

import logging
import os
import threading

from .config import DATA_DIR, STORE_BACKEND
from .csv_export import export_filename, units_to_csv, write_units_csv
from .errors import DuplicateUnitError, StoreError, ValidationError
from .fleet_view import compute_stats, filter_units, next_status, validate_unit_number
from .persistence import BaseRepo
from .schema import COMPONENT_NAMES, STATUS_READY, parse_int
from .sheets_session import SheetsSession

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "Hay una operación en curso. Intente de nuevo en un momento."
NOT_FOUND_MESSAGE = "La unidad no existe."

STORE_BACKENDS = ("excel", "sheets_api", "oauth_sheets", "apps_script", "local", "db")


def make_repo(kind: str = STORE_BACKEND) -> BaseRepo:
    """Build the store named in config; each backend reads its own settings."""
    if kind == "excel":
        from .excel_repo import ExcelRepo
        return ExcelRepo()
    if kind == "sheets_api":
        from .sheets_api_repo import SheetsApiRepo
        return SheetsApiRepo()
    if kind == "oauth_sheets":
        from .oauth_sheets_repo import OAuthSheetsRepo
        return OAuthSheetsRepo(session=SheetsSession())
    if kind == "apps_script":
        from .apps_script_repo import AppsScriptRepo
        return AppsScriptRepo()
    if kind == "local":
        from .local_repo import LocalRepo
        return LocalRepo()
    if kind == "db":
        from .db_repo import DBRepo
        return DBRepo()
    raise ValueError(f"Unknown store backend {kind!r}; expected one of {STORE_BACKENDS}")


def _fail(message, **extra):
    return {"success": False, "message": message, **extra}


class DataManager:
    def __init__(self, repo: BaseRepo = None, export_dir: str = None):
        """
        The repo can be injected (tests, alternate stores); otherwise the
        one named by STORE_BACKEND is built.
        """
        self.repo = repo or make_repo()
        self.export_dir = export_dir or os.path.join(DATA_DIR, 'exports')
        self.units = []
        self._busy = threading.Lock()

    # ─── Helpers ──────────────────────────────────────────────────────────────
    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    def _guarded(self, error_message, func):
        """Run one change; a second one while the first is in flight is turned away."""
        if not self._busy.acquire(blocking=False):
            return _fail(BUSY_MESSAGE)
        try:
            return func()
        except ValidationError as exc:
            return _fail(str(exc))
        except StoreError as exc:
            logger.error("%s: %s", error_message, exc)
            return _fail(error_message)
        finally:
            self._busy.release()

    def _find(self, unit_id):
        return next((u for u in self.units if u["id"] == unit_id), None)

    def _replace(self, unit):
        self.units = [unit if u["id"] == unit["id"] else u for u in self.units]

    @property
    def session(self):
        session = getattr(self.repo, "session", None)
        return session if isinstance(session, SheetsSession) else None

    # ─── Loading ──────────────────────────────────────────────────────────────
    def load_units(self):
        try:
            units = self.repo.get_all_bus_units()
        except StoreError as exc:
            logger.error("Failed to load data: %s", exc)
            self.units = []
            return _fail("Error al conectar con el almacenamiento de datos", units=[])

        self.units = units
        logger.info("Loaded %d units from %s", len(units), self.repo.kind)
        if not units:
            message = "Conexión exitosa. No hay unidades registradas."
        else:
            message = f"{len(units)} unidades cargadas"
        return {"success": True, "message": message, "units": units}

    # ─── Changes ──────────────────────────────────────────────────────────────
    def add_unit(self, raw_number):
        def run():
            number = validate_unit_number(raw_number)
            if any(u["unitNumber"] == number for u in self.units):
                raise DuplicateUnitError("Ya existe una unidad con este número")
            unit = self.repo.create_bus_unit(
                {"unitNumber": number, **{comp: STATUS_READY for comp in COMPONENT_NAMES}}
            )
            self.units = self.units + [unit]
            return {
                "success": True,
                "message": f"Unidad {number} agregada exitosamente.",
                "unit": unit,
            }
        return self._guarded("Error al agregar la unidad", run)

    def toggle_component(self, unit_id, component):
        def run():
            if component not in COMPONENT_NAMES:
                raise ValidationError(f"Componente desconocido: {component}")
            uid = parse_int(unit_id)
            current = self._find(uid) or self.repo.get_bus_unit(uid)
            if current is None:
                return _fail(NOT_FOUND_MESSAGE)

            updated = self.repo.update_bus_unit(uid, {component: next_status(current[component])})
            if updated is None:
                self.units = [u for u in self.units if u["id"] != uid]
                return _fail(NOT_FOUND_MESSAGE)
            self._replace(updated)
            return {"success": True, "message": None, "unit": updated}
        return self._guarded("Error al actualizar el estado", run)

    def delete_unit(self, unit_id):
        def run():
            uid = parse_int(unit_id)
            removed = self.repo.delete_bus_unit(uid)
            self.units = [u for u in self.units if u["id"] != uid]
            if not removed:
                return _fail(NOT_FOUND_MESSAGE)
            return {"success": True, "message": "Unidad eliminada exitosamente."}
        return self._guarded("Error al eliminar la unidad", run)

    def delete_all_units(self):
        def run():
            self.repo.delete_all_bus_units()
            self.units = []
            return {"success": True, "message": "Todos los datos han sido eliminados."}
        return self._guarded("Error al eliminar los datos", run)

    # ─── Views ────────────────────────────────────────────────────────────────
    def filtered_units(self, search="", status_filter="all", component_filter="all"):
        return filter_units(self.units, search, status_filter, component_filter)

    def stats(self):
        return compute_stats(self.units)

    def export_csv(self, directory: str = None, save: bool = False):
        """
        Returns the CSV text and suggested file name for the front-end to
        download; with save=True it is also written under `directory`.
        """
        if not self.units:
            return _fail("No hay datos para exportar.")
        result = {
            "success": True,
            "message": "Datos exportados exitosamente.",
            "filename": export_filename(),
            "content": units_to_csv(self.units),
        }
        if save:
            result["path"] = write_units_csv(self.units, directory or self.export_dir)
        return result

    # ─── Google session ───────────────────────────────────────────────────────
    def sign_in(self):
        session = self.session
        if session is None:
            return _fail("Este almacenamiento no requiere autenticación.")
        if not session.authenticate():
            return _fail("Error de autenticación con Google")
        return {"success": True, "message": "Sesión iniciada."}

    def sign_out(self):
        session = self.session
        if session is None:
            return _fail("Este almacenamiento no requiere autenticación.")
        session.revoke()
        return {"success": True, "message": "Sesión cerrada."}

    def store_info(self):
        session = self.session
        return {
            "backend": self.repo.kind,
            "id_policy": self.repo.id_policy,
            "auth_state": session.state.value if session else None,
            "busy": self.is_busy,
        }
