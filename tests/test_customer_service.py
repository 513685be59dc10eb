from datetime import datetime, timedelta

import pytest

from tailorbook.models.shop_models import CustomLineDraft, MeasurementEntry
from tailorbook.services import customer_service, order_service
from tailorbook.services.errors import AuthorizationError, RecordNotFoundError, ValidationError
from tailorbook.services.line_composer import empty_predefined_drafts

NOW = datetime(2026, 3, 14, 15, 5, 0)


def new_customer(name="Ravi Kumar", phone="9000000001", **kwargs):
    return customer_service.build_customer(name, phone, **kwargs)


class TestBuildCustomer:
    def test_trims_fields_and_drops_blank_measurements(self):
        customer = new_customer(
            "  Anil ",
            " 98765 ",
            reference_name=" Tall Anil ",
            shirt=" 40 ",
            others=[
                MeasurementEntry(label="Kurta", value="42"),
                MeasurementEntry(label=" ", value=""),
                MeasurementEntry(label="", value="Sleeve 24"),
            ],
        )
        assert customer.name == "Anil"
        assert customer.phone == "98765"
        assert customer.reference_name == "Tall Anil"
        assert customer.measurements.shirt == "40"
        assert customer.measurements.pant == ""
        assert customer.measurements.others == [
            MeasurementEntry(label="Kurta", value="42"),
            MeasurementEntry(label="", value="Sleeve 24"),
        ]

    @pytest.mark.parametrize(
        "name, phone, message",
        [("", "1", "name is required"), ("Anil", "  ", "Phone number is required")],
    )
    def test_required_fields(self, name, phone, message):
        with pytest.raises(ValidationError, match=message):
            customer_service.build_customer(name, phone)


class TestSaveCustomer:
    def test_requires_session(self):
        with pytest.raises(AuthorizationError):
            customer_service.save_customer(new_customer(), session=None)
        assert customer_service.count_customers() == 0

    def test_round_trip(self, session):
        saved = customer_service.save_customer(
            new_customer(pant="32", others=[MeasurementEntry(label="Waistcoat", value="38")]),
            session=session,
            now=NOW,
        )
        assert saved.id

        loaded = customer_service.fetch_customer(saved.id)
        assert loaded == saved
        assert customer_service.count_customers() == 1

    def test_edit_keeps_id_and_created_at(self, session):
        saved = customer_service.save_customer(new_customer(), session=session, now=NOW)
        edited = customer_service.build_customer("Ravi K", "9000000002", existing=saved)
        updated = customer_service.save_customer(edited, session=session, now=NOW + timedelta(days=1))

        assert updated.id == saved.id
        assert updated.created_at == NOW
        assert updated.updated_at == NOW + timedelta(days=1)
        assert customer_service.fetch_customer(saved.id).name == "Ravi K"

    def test_listing_is_sorted_by_name(self, session):
        for name in ("zara", "Bala", "anil"):
            customer_service.save_customer(new_customer(name), session=session)
        assert [c.name for c in customer_service.list_customers()] == ["anil", "Bala", "zara"]

    def test_feed_receives_refreshed_list(self, session):
        received = []
        customer_service.customer_feed.subscribe(received.append)
        saved = customer_service.save_customer(new_customer(), session=session)
        customer_service.delete_customer(saved.id, session=session)
        assert [len(snapshot) for snapshot in received] == [1, 0]


class TestDeleteCustomer:
    def test_missing_customer(self, session):
        with pytest.raises(RecordNotFoundError):
            customer_service.delete_customer("nobody", session=session)

    def test_orders_keep_snapshot(self, session):
        saved = customer_service.save_customer(new_customer(), session=session)
        order = order_service.save_order(
            order_service.build_order(
                saved,
                empty_predefined_drafts(),
                [CustomLineDraft(label="Coat", quantity=1, unit_cost=900)],
                due_date=None,
                status="Pending",
                paid_amount=0,
            ),
            session=session,
        )

        customer_service.delete_customer(saved.id, session=session)

        assert customer_service.fetch_customer(saved.id) is None
        kept = order_service.fetch_order(order.id)
        assert kept.customer_name == "Ravi Kumar"
        assert kept.phone == "9000000001"
