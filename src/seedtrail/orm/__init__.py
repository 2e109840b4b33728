"""SQLAlchemy ORM adapter: model reflection, record store, event hooks, replay."""

from seedtrail.orm.listeners import TrackingInstallation, install_tracking, uninstall_tracking
from seedtrail.orm.reflection import entity_type_for_model
from seedtrail.orm.replay import apply_seed_file, apply_seed_files
from seedtrail.orm.store import SQLAlchemyRecordStore

__all__ = [
    "SQLAlchemyRecordStore",
    "TrackingInstallation",
    "apply_seed_file",
    "apply_seed_files",
    "entity_type_for_model",
    "install_tracking",
    "uninstall_tracking",
]
