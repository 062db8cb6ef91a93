"""
API tests for testimonials and the contact inbox
"""
from decimal import Decimal

import pytest

from kalakari import models
from kalakari.core import csrf
from kalakari.models import ContactMessage, Order, OrderItem


@pytest.fixture
def purchase(db, customer, make_product):
    """Record an order for `product` in the given status and return the product"""

    def _purchase(status: str = "delivered", product=None):
        product = product or make_product()
        order = Order(
            order_number=f"KAL-TEST-{product.id}-{status}",
            customer_id=customer.id,
            shipping_address={"city": "Jaipur"},
            subtotal=Decimal("500"),
            total=Decimal("500"),
            status=status,
        )
        order.items.append(OrderItem(
            product_id=product.id,
            artisan_id=product.artisan_id,
            product_name=product.name,
            quantity=1,
            unit_price=Decimal("500"),
        ))
        db.add(order)
        db.commit()
        return product

    return _purchase


def testimonial_body(product_id, **fields):
    return {"product_id": product_id, "content": "Beautiful glaze and quick delivery", "rating": 5, **fields}


testimonial_body.__test__ = False  # helper, not a test


class TestTestimonials:

    def test_purchaser_submits_pending(self, client, db, customer, headers_for, purchase):
        product = purchase("shipped")

        response = client.post("/api/testimonials", json=testimonial_body(product.id), headers=headers_for(customer))

        assert response.status_code == 201
        assert "reviewed and published soon" in response.json()["message"]
        assert response.json()["data"]["testimonial"]["is_approved"] is False
        # Pending testimonials are not public
        assert client.get("/api/testimonials").json()["data"]["testimonials"] == []
        testimonial_id = response.json()["data"]["testimonial"]["id"]
        assert client.get(f"/api/testimonials/{testimonial_id}").status_code == 404

    def test_requires_purchase(self, client, customer, headers_for, make_product, purchase):
        cancelled = purchase("cancelled")

        for product in (make_product(), cancelled):
            response = client.post("/api/testimonials", json=testimonial_body(product.id),
                                   headers=headers_for(customer))
            assert response.status_code == 400
            assert response.json()["message"] == "You can only submit testimonials for products you have purchased"

    def test_one_per_product(self, client, customer, headers_for, purchase):
        product = purchase()
        client.post("/api/testimonials", json=testimonial_body(product.id), headers=headers_for(customer))

        response = client.post("/api/testimonials", json=testimonial_body(product.id), headers=headers_for(customer))

        assert response.status_code == 400
        assert response.json()["message"] == "You have already submitted a testimonial for this product"

    def test_customers_only(self, client, admin, headers_for, purchase):
        product = purchase()
        response = client.post("/api/testimonials", json=testimonial_body(product.id), headers=headers_for(admin))
        assert response.status_code == 403

    def test_validation(self, client, customer, headers_for, purchase):
        product = purchase()

        response = client.post("/api/testimonials", json=testimonial_body(product.id, content="short", rating=6),
                               headers=headers_for(customer))

        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert {"content", "rating"} <= fields

    def test_approval_publishes(self, client, db, customer, admin, headers_for, purchase):
        product = purchase()
        created = client.post("/api/testimonials", json=testimonial_body(product.id), headers=headers_for(customer))
        testimonial_id = created.json()["data"]["testimonial"]["id"]

        response = client.put(f"/api/testimonials/{testimonial_id}/approve",
                               json={"is_approved": True, "is_featured": True}, headers=headers_for(admin))

        assert response.status_code == 200
        assert response.json()["message"] == "Testimonial status updated successfully"
        stored = db.get(models.Testimonial, testimonial_id)
        assert stored.approved_by == admin.id
        assert stored.approved_at is not None

        listed = client.get("/api/testimonials", params={"featured": True}).json()["data"]
        assert [t["id"] for t in listed["testimonials"]] == [testimonial_id]
        assert listed["testimonials"][0]["product_name"] == product.name
        assert listed["pagination"]["total"] == 1
        assert client.get(f"/api/testimonials/{testimonial_id}").status_code == 200

    def test_approve_requires_admin(self, client, customer, headers_for, purchase):
        product = purchase()
        created = client.post("/api/testimonials", json=testimonial_body(product.id), headers=headers_for(customer))
        testimonial_id = created.json()["data"]["testimonial"]["id"]

        response = client.put(f"/api/testimonials/{testimonial_id}/approve",
                               json={"is_approved": True}, headers=headers_for(customer))
        assert response.status_code == 403

    def test_edit_returns_to_moderation(self, client, db, customer, admin, headers_for, purchase):
        product = purchase()
        created = client.post("/api/testimonials", json=testimonial_body(product.id), headers=headers_for(customer))
        testimonial_id = created.json()["data"]["testimonial"]["id"]
        client.put(f"/api/testimonials/{testimonial_id}/approve", json={"is_approved": True},
                   headers=headers_for(admin))

        response = client.put(f"/api/testimonials/{testimonial_id}", json={"rating": 4},
                              headers=headers_for(customer))

        assert response.status_code == 200
        assert response.json()["message"] == "Testimonial updated successfully. It will be reviewed again."
        stored = db.get(models.Testimonial, testimonial_id)
        db.refresh(stored)
        assert stored.rating == 4
        assert stored.is_approved is False
        assert stored.approved_at is None

    def test_edit_rejects_null(self, client, customer, headers_for, purchase):
        product = purchase()
        created = client.post("/api/testimonials", json=testimonial_body(product.id), headers=headers_for(customer))
        testimonial_id = created.json()["data"]["testimonial"]["id"]

        response = client.put(f"/api/testimonials/{testimonial_id}", json={"content": None},
                              headers=headers_for(customer))
        assert response.status_code == 400

    def test_only_author_edits_or_deletes(self, client, db, customer, make_user, headers_for, purchase):
        product = purchase()
        created = client.post("/api/testimonials", json=testimonial_body(product.id), headers=headers_for(customer))
        testimonial_id = created.json()["data"]["testimonial"]["id"]
        stranger = make_user()

        assert client.put(f"/api/testimonials/{testimonial_id}", json={"rating": 1},
                          headers=headers_for(stranger)).status_code == 404
        assert client.delete(f"/api/testimonials/{testimonial_id}", headers=headers_for(stranger)).status_code == 404

        response = client.delete(f"/api/testimonials/{testimonial_id}", headers=headers_for(customer))
        assert response.json()["message"] == "Testimonial deleted successfully"
        assert db.query(models.Testimonial).count() == 0

    def test_admin_queue_lists_pending(self, client, customer, admin, headers_for, purchase):
        product = purchase()
        client.post("/api/testimonials", json=testimonial_body(product.id), headers=headers_for(customer))

        response = client.get("/api/testimonials/admin/all", params={"approved": False}, headers=headers_for(admin))

        assert response.status_code == 200
        assert len(response.json()["data"]["testimonials"]) == 1


def contact_body(**fields):
    return {
        "name": "Meera Iyer",
        "email": "meera@example.com",
        "subject": "Bulk order for a wedding",
        "message": "We would like 200 diyas delivered to Chennai in November.",
        **fields,
    }


def anonymous_headers():
    return {"X-CSRF-Token": csrf.generate_token()}


class TestContact:

    def test_public_submission(self, client, db):
        response = client.post("/api/contact", json=contact_body(category="sales"), headers=anonymous_headers())

        assert response.status_code == 201
        assert response.json()["message"] == "Thank you for your message! We will get back to you within 24-48 hours."
        data = response.json()["data"]
        assert data["reference"] == f"CONT-{data['contact_id']:06d}"

        stored = db.get(ContactMessage, data["contact_id"])
        assert stored.status == "new"
        assert stored.priority == "medium"
        assert stored.ip_address == "testclient"

    def test_complaints_are_high_priority(self, client, db):
        response = client.post("/api/contact", json=contact_body(category="complaint"), headers=anonymous_headers())
        assert db.get(ContactMessage, response.json()["data"]["contact_id"]).priority == "high"

    def test_submission_needs_csrf_token(self, client):
        assert client.post("/api/contact", json=contact_body()).status_code == 403

    @pytest.mark.parametrize("fields", [
        {"name": "M"},
        {"email": "not-an-email"},
        {"subject": "Hi"},
        {"message": "Too short"},
        {"phone": "12345"},
        {"category": "gossip"},
    ])
    def test_validation(self, client, fields):
        response = client.post("/api/contact", json=contact_body(**fields), headers=anonymous_headers())
        assert response.status_code == 400

    def test_inbox_is_admin_only(self, client, customer, headers_for):
        assert client.get("/api/contact").status_code == 401
        assert client.get("/api/contact", headers=headers_for(customer)).status_code == 403

    def test_admin_filters_and_searches(self, client, admin, headers_for):
        client.post("/api/contact", json=contact_body(), headers=anonymous_headers())
        client.post("/api/contact", json=contact_body(category="artisan", subject="Joining as a weaver"),
                    headers=anonymous_headers())

        by_category = client.get("/api/contact", params={"category": "artisan"}, headers=headers_for(admin))
        by_search = client.get("/api/contact", params={"search": "diyas"}, headers=headers_for(admin))

        assert [c["subject"] for c in by_category.json()["data"]["contacts"]] == ["Joining as a weaver"]
        assert by_search.json()["data"]["pagination"]["total"] == 2

    def test_admin_updates_and_deletes(self, client, db, admin, headers_for):
        contact_id = client.post("/api/contact", json=contact_body(),
                                 headers=anonymous_headers()).json()["data"]["contact_id"]

        response = client.put(f"/api/contact/{contact_id}",
                              json={"status": "resolved", "response": "Shipped on the 3rd", "admin_notes": "VIP"},
                              headers=headers_for(admin))

        assert response.status_code == 200
        assert response.json()["message"] == "Contact submission updated successfully"
        contact = response.json()["data"]["contact"]
        assert contact["status"] == "resolved"
        assert contact["updated_by"] == admin.id

        stats = client.get("/api/contact/stats", headers=headers_for(admin)).json()["data"]["stats"]
        assert stats["resolved"] == 1
        assert stats["total"] == 1

        response = client.delete(f"/api/contact/{contact_id}", headers=headers_for(admin))
        assert response.json()["message"] == "Contact submission deleted successfully"
        assert client.get(f"/api/contact/{contact_id}", headers=headers_for(admin)).status_code == 404

    def test_update_rejects_unknown_status(self, client, admin, headers_for):
        contact_id = client.post("/api/contact", json=contact_body(),
                                 headers=anonymous_headers()).json()["data"]["contact_id"]

        for status in ("archived", None):
            response = client.put(f"/api/contact/{contact_id}", json={"status": status}, headers=headers_for(admin))
            assert response.status_code == 400
