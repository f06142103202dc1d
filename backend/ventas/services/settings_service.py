from __future__ import annotations

from typing import Any, Mapping

from ..extensions import db
from ..models import Setting
from .receipt_service import ReceiptConfig, ReceiptConfigError
from ventas.time_utils import utcnow


RECEIPT_SETTINGS_KEY = "receipt"


class SettingsError(ValueError):
    pass


def get_setting(key: str) -> Setting | None:
    return db.session.query(Setting).filter_by(key=key).first()


def set_setting(key: str, value: Any, *, user_id: int | None = None) -> Setting:
    setting = get_setting(key)
    if setting is None:
        setting = Setting(key=key)
        db.session.add(setting)
    setting.value = value
    setting.updated_by_user_id = user_id
    setting.updated_at = utcnow()
    db.session.commit()
    return setting


def get_receipt_config() -> ReceiptConfig:
    """
    Stored receipt configuration, defaults when nothing is stored.

    Raises SettingsError if the stored document no longer validates.
    """
    setting = get_setting(RECEIPT_SETTINGS_KEY)
    if setting is None or setting.value is None:
        return ReceiptConfig()
    try:
        return ReceiptConfig.from_mapping(setting.value)
    except ReceiptConfigError as exc:
        raise SettingsError(f"Stored receipt settings are invalid: {exc}") from exc


def update_receipt_config(
    updates: Mapping[str, Any],
    *,
    user_id: int | None = None,
    replace: bool = False,
) -> ReceiptConfig:
    """
    Validate and store receipt options.

    replace=False merges updates over the current config (PATCH);
    replace=True starts from the defaults (PUT). Raises ReceiptConfigError.
    """
    base = ReceiptConfig() if replace else get_receipt_config()
    config = base.merged(updates)
    set_setting(RECEIPT_SETTINGS_KEY, config.to_dict(), user_id=user_id)
    return config


def reset_receipt_config(*, user_id: int | None = None) -> ReceiptConfig:
    config = ReceiptConfig()
    set_setting(RECEIPT_SETTINGS_KEY, config.to_dict(), user_id=user_id)
    return config
