import os

import pytest

from thela_rental.core.config import AppConfig, load_config, save_config
from thela_rental.core.db_manager import DBManager
from thela_rental.core.errors import PersistenceError


def test_storage_slot_set_get_remove(db_manager):
    assert db_manager.get_item("carts") is None

    db_manager.set_item("carts", "[]")
    db_manager.set_item("carts", '[{"cartId": "C1"}]')

    assert db_manager.get_item("carts") == '[{"cartId": "C1"}]'
    db_manager.remove_item("carts")
    assert db_manager.get_item("carts") is None


def test_binary_values_are_kept_as_bytes(db_manager):
    db_manager.set_item("carts", b"\x00\x01gAAAA")
    assert db_manager.get_item("carts") == b"\x00\x01gAAAA"


def test_data_survives_reopening(tmp_path):
    path = os.path.join(tmp_path, "thela.db")
    with DBManager(path) as manager:
        manager.set_item("carts", "[]")
        manager.save_config({"reminder_hour": 8})

    with DBManager(path) as manager:
        assert manager.get_item("carts") == "[]"
        assert manager.get_config() == {"reminder_hour": "8"}


def test_bad_query_raises_persistence_error(db_manager):
    with pytest.raises(PersistenceError):
        db_manager.execute_query("SELECT * FROM no_such_table")


def test_closed_connection_raises_persistence_error(db_manager):
    db_manager.close()
    with pytest.raises(PersistenceError, match="closed"):
        db_manager.get_item("carts")


def test_load_config_defaults(db_manager):
    assert load_config(db_manager) == AppConfig()


def test_config_round_trip(db_manager):
    config = AppConfig(storage_key="carts_2024", reminder_hour=7, reminder_minute=45, currency_symbol="Rs.", encrypt_storage=True)
    save_config(db_manager, config)
    assert load_config(db_manager) == config


@pytest.mark.parametrize("raw, expected", [("yes", True), ("OFF", False), ("1", True), ("false", False)])
def test_boolean_settings_accept_common_spellings(db_manager, raw, expected):
    db_manager.save_config({"encrypt_storage": raw})
    assert load_config(db_manager).encrypt_storage is expected


def test_invalid_settings_fall_back_to_defaults(db_manager):
    db_manager.save_config({
        "reminder_hour": "25",
        "reminder_minute": "half past",
        "encrypt_storage": "maybe",
        "storage_key": "  ",
        "currency_symbol": "$",
    })

    config = load_config(db_manager)

    assert config.reminder_hour == 9
    assert config.reminder_minute == 0
    assert config.encrypt_storage is False
    assert config.storage_key == "carts"
    assert config.currency_symbol == "$"
