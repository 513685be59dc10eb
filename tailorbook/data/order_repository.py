from __future__ import annotations

import sqlite3
from datetime import date
from typing import Dict, List, Optional, Sequence

from ..models.shop_models import Order, OrderLineItem
from .database import create_connection, decode_timestamp, encode_timestamp


_DATE_FORMAT = "%Y-%m-%d"

_ORDER_COLUMNS = """
    id,
    customer_id,
    customer_name,
    phone,
    due_date,
    status,
    paid_amount,
    shirts_completed,
    pants_completed,
    total_amount,
    balance_amount,
    payment_status,
    created_at,
    updated_at
"""


def insert_order(order: Order) -> None:
    with create_connection() as connection:
        cursor = connection.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO orders (
                    id,
                    customer_id,
                    customer_name,
                    phone,
                    due_date,
                    status,
                    paid_amount,
                    shirts_completed,
                    pants_completed,
                    total_amount,
                    balance_amount,
                    payment_status,
                    created_at,
                    updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    order.id,
                    order.customer_id,
                    order.customer_name,
                    order.phone,
                    _encode_date(order.due_date),
                    order.status,
                    float(order.paid_amount),
                    int(order.shirts_completed),
                    int(order.pants_completed),
                    float(order.total_amount),
                    float(order.balance_amount),
                    order.payment_status,
                    encode_timestamp(order.created_at),
                    encode_timestamp(order.updated_at),
                ),
            )
            _insert_items(cursor, str(order.id), order.items)
            connection.commit()
        except sqlite3.Error:
            connection.rollback()
            raise
        finally:
            cursor.close()


def update_order(order: Order) -> bool:
    with create_connection() as connection:
        cursor = connection.cursor()
        try:
            cursor.execute(
                """
                UPDATE orders
                SET
                    customer_id = ?,
                    customer_name = ?,
                    phone = ?,
                    due_date = ?,
                    status = ?,
                    paid_amount = ?,
                    shirts_completed = ?,
                    pants_completed = ?,
                    total_amount = ?,
                    balance_amount = ?,
                    payment_status = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    order.customer_id,
                    order.customer_name,
                    order.phone,
                    _encode_date(order.due_date),
                    order.status,
                    float(order.paid_amount),
                    int(order.shirts_completed),
                    int(order.pants_completed),
                    float(order.total_amount),
                    float(order.balance_amount),
                    order.payment_status,
                    encode_timestamp(order.updated_at),
                    order.id,
                ),
            )
            if cursor.rowcount == 0:
                connection.rollback()
                return False

            cursor.execute("DELETE FROM order_items WHERE order_id = ?", (order.id,))
            _insert_items(cursor, str(order.id), order.items)
            connection.commit()
            return True
        except sqlite3.Error:
            connection.rollback()
            raise
        finally:
            cursor.close()


def delete_order(order_id: str) -> bool:
    with create_connection() as connection:
        cursor = connection.cursor()
        try:
            cursor.execute("DELETE FROM order_items WHERE order_id = ?", (order_id,))
            cursor.execute("DELETE FROM orders WHERE id = ?", (order_id,))
            deleted = cursor.rowcount > 0
            connection.commit()
            return deleted
        except sqlite3.Error:
            connection.rollback()
            raise
        finally:
            cursor.close()


def fetch_orders(limit: Optional[int] = None) -> List[Order]:
    sql = f"SELECT {_ORDER_COLUMNS} FROM orders ORDER BY created_at DESC, id ASC"
    params: Sequence[object] = ()
    if limit is not None:
        sql += " LIMIT ?"
        params = (int(limit),)

    with create_connection() as connection:
        order_rows = connection.execute(sql, params).fetchall()
        items_by_order = _fetch_items(connection, [row["id"] for row in order_rows])

    return [_row_to_order(row, items_by_order.get(row["id"], [])) for row in order_rows]


def fetch_order(order_id: str) -> Optional[Order]:
    with create_connection() as connection:
        row = connection.execute(
            f"SELECT {_ORDER_COLUMNS} FROM orders WHERE id = ?",
            (order_id,),
        ).fetchone()
        if row is None:
            return None
        items_by_order = _fetch_items(connection, [row["id"]])

    return _row_to_order(row, items_by_order.get(row["id"], []))


def fetch_orders_for_customer(customer_id: str) -> List[Order]:
    with create_connection() as connection:
        order_rows = connection.execute(
            f"SELECT {_ORDER_COLUMNS} FROM orders WHERE customer_id = ? ORDER BY created_at DESC, id ASC",
            (customer_id,),
        ).fetchall()
        items_by_order = _fetch_items(connection, [row["id"] for row in order_rows])

    return [_row_to_order(row, items_by_order.get(row["id"], [])) for row in order_rows]


def _insert_items(cursor: sqlite3.Cursor, order_id: str, items: Sequence[OrderLineItem]) -> None:
    cursor.executemany(
        """
        INSERT INTO order_items (
            order_id,
            position,
            kind,
            label,
            quantity,
            unit_cost
        ) VALUES (?, ?, ?, ?, ?, ?)
        """,
        [
            (
                order_id,
                position,
                item.kind,
                item.label,
                item.quantity,
                item.unit_cost,
            )
            for position, item in enumerate(items)
        ],
    )


def _fetch_items(connection: sqlite3.Connection, order_ids: List[str]) -> Dict[str, List[OrderLineItem]]:
    items_by_order: Dict[str, List[OrderLineItem]] = {order_id: [] for order_id in order_ids}
    if not order_ids:
        return items_by_order

    placeholder = ",".join("?" for _ in order_ids)
    cursor = connection.execute(
        f"""
        SELECT
            order_id,
            kind,
            label,
            quantity,
            unit_cost
        FROM order_items
        WHERE order_id IN ({placeholder})
        ORDER BY order_id, position, id
        """,
        order_ids,
    )
    try:
        for row in cursor.fetchall():
            items_by_order[row["order_id"]].append(
                OrderLineItem(
                    kind=row["kind"],
                    label=row["label"] or "",
                    quantity=row["quantity"],
                    unit_cost=row["unit_cost"],
                )
            )
    finally:
        cursor.close()
    return items_by_order


def _row_to_order(row: sqlite3.Row, items: List[OrderLineItem]) -> Order:
    return Order(
        id=row["id"],
        customer_id=row["customer_id"],
        customer_name=row["customer_name"],
        phone=row["phone"] or "",
        items=items,
        due_date=_decode_date(row["due_date"]),
        status=row["status"],
        paid_amount=float(row["paid_amount"] or 0.0),
        shirts_completed=int(row["shirts_completed"] or 0),
        pants_completed=int(row["pants_completed"] or 0),
        created_at=decode_timestamp(row["created_at"]),
        updated_at=decode_timestamp(row["updated_at"]),
        total_amount=float(row["total_amount"] or 0.0),
        balance_amount=float(row["balance_amount"] or 0.0),
        payment_status=row["payment_status"],
    )


def _encode_date(value: Optional[date]) -> Optional[str]:
    return value.strftime(_DATE_FORMAT) if value else None


def _decode_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None
