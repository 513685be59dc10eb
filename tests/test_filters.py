from tailorbook.models.shop_models import Customer, Order
from tailorbook.viewmodels.filters import ALL_STATUSES, filter_orders, search_customers

CUSTOMERS = [
    Customer(id="1", name="Ravi Kumar", phone="9000000001", reference_name="Tall Ravi"),
    Customer(id="2", name="Anil", phone="9123456789"),
]

ORDERS = [
    Order(id="o1", customer_id="1", customer_name="Ravi Kumar", phone="9000000001", status="Pending"),
    Order(id="o2", customer_id="2", customer_name="Anil", phone="9123456789", status="Delivered"),
    Order(id="o3", customer_id="2", customer_name="Anil", phone="9123456789", status="Pending"),
]


def test_blank_search_returns_everything():
    assert search_customers(CUSTOMERS, "  ") == CUSTOMERS


def test_search_by_name_reference_and_phone():
    assert [c.id for c in search_customers(CUSTOMERS, "ravi")] == ["1"]
    assert [c.id for c in search_customers(CUSTOMERS, "TALL")] == ["1"]
    assert [c.id for c in search_customers(CUSTOMERS, "2345")] == ["2"]
    assert search_customers(CUSTOMERS, "zzz") == []


def test_order_filter_combines_search_and_status():
    assert [o.id for o in filter_orders(ORDERS, "", ALL_STATUSES)] == ["o1", "o2", "o3"]
    assert [o.id for o in filter_orders(ORDERS, "anil")] == ["o2", "o3"]
    assert [o.id for o in filter_orders(ORDERS, "", "Pending")] == ["o1", "o3"]
    assert [o.id for o in filter_orders(ORDERS, "9123", "Delivered")] == ["o2"]
