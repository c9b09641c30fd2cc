# busboard/app.py
# Defines the Eel‑exposed functions that drive the front‑end, delegating all data operations to the DataManager façade.

import logging
import os

import eel

from .config import DATA_DIR, LOG_LEVEL
from .data_manager import DataManager

logger = logging.getLogger(__name__)

HERE = os.path.dirname(__file__)
FRONTEND_DIR = os.path.abspath(os.path.join(HERE, '..', 'frontend'))

# ─── Bootstrap data folder + store on import ───────────────────────────────
os.makedirs(DATA_DIR, exist_ok=True)
dm = DataManager()


# ─── Unit list ──────────────────────────────────────────────────────────────
@eel.expose
def get_units():
    """The list currently held by the façade (no round-trip to the store)."""
    return dm.units

@eel.expose
def refresh_units():
    return dm.load_units()

@eel.expose
def get_filtered_units(search="", status_filter="all", component_filter="all"):
    return dm.filtered_units(search, status_filter, component_filter)

@eel.expose
def get_stats():
    return dm.stats()


# ─── Changes ────────────────────────────────────────────────────────────────
@eel.expose
def add_unit(unit_number):
    return dm.add_unit(unit_number)

@eel.expose
def toggle_component(unit_id, component):
    return dm.toggle_component(unit_id, component)

@eel.expose
def delete_unit(unit_id):
    return dm.delete_unit(unit_id)

@eel.expose
def delete_all_units():
    return dm.delete_all_units()


# ─── Export ─────────────────────────────────────────────────────────────────
@eel.expose
def export_csv(save=False):
    """
    Returns {success, filename, content}; the page turns `content` into a
    download. save=True also writes it under data/exports/.
    """
    return dm.export_csv(save=save)


# ─── Store / Google session ─────────────────────────────────────────────────
@eel.expose
def get_store_info():
    return dm.store_info()

@eel.expose
def sign_in():
    return dm.sign_in()

@eel.expose
def sign_out():
    return dm.sign_out()


# ─── App startup ────────────────────────────────────────────────────────────
def main():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting with the %s store", dm.repo.kind)
    dm.load_units()
    eel.init(FRONTEND_DIR)
    eel.start('index.html', size=(1200, 800))

if __name__ == '__main__':
    main()
