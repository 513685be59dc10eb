from __future__ import annotations

import json
import sqlite3
from typing import Iterable, List, Optional

from ..models.shop_models import Customer, MeasurementEntry, Measurements
from .database import create_connection, decode_timestamp, encode_timestamp, iter_rows


_COLUMNS = """
    id,
    name,
    reference_name,
    phone,
    shirt_measurement,
    pant_measurement,
    other_measurements,
    created_at,
    updated_at
"""


def list_customers() -> List[Customer]:
    return [
        _row_to_customer(row)
        for row in iter_rows(f"SELECT {_COLUMNS} FROM customers ORDER BY name COLLATE NOCASE ASC, id ASC")
    ]


def count_customers() -> int:
    with create_connection() as connection:
        row = connection.execute("SELECT COUNT(*) FROM customers").fetchone()
    return int(row[0]) if row is not None else 0


def fetch_customer(customer_id: str) -> Optional[Customer]:
    with create_connection() as connection:
        row = connection.execute(
            f"SELECT {_COLUMNS} FROM customers WHERE id = ?",
            (customer_id,),
        ).fetchone()

    if row is None:
        return None
    return _row_to_customer(row)


def insert_customer(customer: Customer) -> None:
    with create_connection() as connection:
        cursor = connection.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO customers (
                    id,
                    name,
                    reference_name,
                    phone,
                    shirt_measurement,
                    pant_measurement,
                    other_measurements,
                    created_at,
                    updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    customer.id,
                    customer.name,
                    customer.reference_name,
                    customer.phone,
                    customer.measurements.shirt,
                    customer.measurements.pant,
                    _serialize_others(customer.measurements.others),
                    encode_timestamp(customer.created_at),
                    encode_timestamp(customer.updated_at),
                ),
            )
            connection.commit()
        except sqlite3.Error:
            connection.rollback()
            raise
        finally:
            cursor.close()


def update_customer(customer: Customer) -> bool:
    with create_connection() as connection:
        cursor = connection.cursor()
        try:
            cursor.execute(
                """
                UPDATE customers
                SET
                    name = ?,
                    reference_name = ?,
                    phone = ?,
                    shirt_measurement = ?,
                    pant_measurement = ?,
                    other_measurements = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    customer.name,
                    customer.reference_name,
                    customer.phone,
                    customer.measurements.shirt,
                    customer.measurements.pant,
                    _serialize_others(customer.measurements.others),
                    encode_timestamp(customer.updated_at),
                    customer.id,
                ),
            )
            connection.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            connection.rollback()
            raise
        finally:
            cursor.close()


def delete_customer(customer_id: str) -> bool:
    with create_connection() as connection:
        cursor = connection.execute("DELETE FROM customers WHERE id = ?", (customer_id,))
        connection.commit()
        return cursor.rowcount > 0


def _row_to_customer(row: sqlite3.Row) -> Customer:
    return Customer(
        id=row["id"],
        name=row["name"],
        reference_name=row["reference_name"] or "",
        phone=row["phone"],
        measurements=Measurements(
            shirt=row["shirt_measurement"] or "",
            pant=row["pant_measurement"] or "",
            others=_deserialize_others(row["other_measurements"]),
        ),
        created_at=decode_timestamp(row["created_at"]),
        updated_at=decode_timestamp(row["updated_at"]),
    )


def _serialize_others(entries: Iterable[MeasurementEntry]) -> str:
    return json.dumps([{"label": entry.label, "value": entry.value} for entry in entries])


def _deserialize_others(raw: Optional[str]) -> List[MeasurementEntry]:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return []

    entries: List[MeasurementEntry] = []
    if isinstance(parsed, list):
        for entry in parsed:
            if not isinstance(entry, dict):
                continue
            entries.append(
                MeasurementEntry(
                    label=str(entry.get("label", "")),
                    value=str(entry.get("value", "")),
                )
            )
    return entries
