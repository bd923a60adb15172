"""Integration tests for Reviews API endpoints via TestClient."""

import pytest


@pytest.fixture()
def submit(client, product, author, headers_for):
    def _submit(identity=None, **overrides):
        body = {
            "product_id": product,
            "rating": 4,
            "comment": "Submitted through the API and long enough to read.",
        }
        body.update(overrides)
        response = client.post("/reviews", json=body, headers=headers_for(identity or author))
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _submit


@pytest.fixture()
def approve(client, mod, headers_for):
    def _approve(review_id):
        response = client.patch(f"/reviews/{review_id}", json={"status": "approved"}, headers=headers_for(mod))
        assert response.status_code == 200, response.text
        return response.json()

    return _approve


class TestSubmitReviewAPI:
    def test_submit_returns_201(self, client, product, author, headers_for):
        response = client.post(
            "/reviews",
            json={
                "product_id": product,
                "rating": 5,
                "title": "Excellent",
                "comment": "I absolutely love these, they work perfectly!",
                "images": [{"url": "https://cdn.example.com/img.jpg", "alt_text": "Photo"}],
            },
            headers=headers_for(author),
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["author_id"] == author.user_id
        assert body["images"] == [{"url": "https://cdn.example.com/img.jpg", "alt_text": "Photo"}]

    def test_submit_without_identity_returns_401(self, client, product):
        response = client.post("/reviews", json={"product_id": product, "rating": 4, "comment": "Anonymous"})
        assert response.status_code == 401

    def test_missing_comment_returns_400(self, client, product, author, headers_for):
        response = client.post("/reviews", json={"product_id": product, "rating": 4}, headers=headers_for(author))
        assert response.status_code == 400

    def test_rating_out_of_range_returns_400(self, client, product, author, headers_for):
        response = client.post(
            "/reviews",
            json={"product_id": product, "rating": 6, "comment": "Six stars!"},
            headers=headers_for(author),
        )
        assert response.status_code == 400

    def test_unknown_product_returns_404(self, client, author, headers_for):
        response = client.post(
            "/reviews",
            json={"product_id": "prod-missing", "rating": 4, "comment": "Where is it?"},
            headers=headers_for(author),
        )
        assert response.status_code == 404

    def test_duplicate_returns_409(self, client, submit, product, author, headers_for):
        submit()
        response = client.post(
            "/reviews",
            json={"product_id": product, "rating": 2, "comment": "Second attempt"},
            headers=headers_for(author),
        )
        assert response.status_code == 409
        assert response.json()["error"] == "You have already reviewed this product"


class TestUpdateReviewAPI:
    def test_moderator_approves(self, client, submit, mod, headers_for):
        review_id = submit()
        response = client.patch(f"/reviews/{review_id}", json={"status": "approved"}, headers=headers_for(mod))
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

    def test_reject_with_response(self, client, submit, mod, headers_for):
        review_id = submit()
        response = client.patch(
            f"/reviews/{review_id}",
            json={"status": "rejected", "response": "off-topic"},
            headers=headers_for(mod),
        )
        assert response.status_code == 200
        assert response.json()["response"]["comment"] == "off-topic"

    def test_author_edit_returns_200(self, client, submit, author, headers_for):
        review_id = submit()
        response = client.patch(f"/reviews/{review_id}", json={"comment": "Edited by me"}, headers=headers_for(author))
        assert response.status_code == 200
        assert response.json()["comment"] == "Edited by me"

    def test_author_status_change_returns_403(self, client, submit, author, headers_for):
        review_id = submit()
        response = client.patch(f"/reviews/{review_id}", json={"status": "approved"}, headers=headers_for(author))
        assert response.status_code == 403

    def test_other_customer_returns_403(self, client, submit, other_customer, headers_for):
        review_id = submit()
        response = client.patch(
            f"/reviews/{review_id}",
            json={"comment": "Not mine"},
            headers=headers_for(other_customer),
        )
        assert response.status_code == 403

    def test_unauthenticated_returns_401(self, client, submit):
        review_id = submit()
        response = client.patch(f"/reviews/{review_id}", json={"status": "approved"})
        assert response.status_code == 401

    def test_unknown_review_returns_404(self, client, product, mod, headers_for):
        response = client.patch("/reviews/missing", json={"status": "approved"}, headers=headers_for(mod))
        assert response.status_code == 404

    def test_back_to_pending_returns_400(self, client, submit, mod, headers_for):
        review_id = submit()
        response = client.patch(f"/reviews/{review_id}", json={"status": "pending"}, headers=headers_for(mod))
        assert response.status_code == 400


class TestReadAPI:
    def test_list_returns_pagination(self, client, submit, approve, product, make_customer, headers_for):
        for index in range(3):
            approve(submit(identity=make_customer(user_id=f"cust-{index}")))

        response = client.get("/reviews", params={"product_id": product, "limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert len(body["reviews"]) == 2
        assert body["pagination"] == {"total": 3, "page": 1, "pages": 2}

    def test_public_list_hides_pending(self, client, submit):
        submit()
        response = client.get("/reviews")
        assert response.json()["pagination"]["total"] == 0

    def test_limit_above_maximum_returns_400(self, client):
        response = client.get("/reviews", params={"limit": 51})
        assert response.status_code == 400

    def test_zero_limit_returns_400(self, client):
        response = client.get("/reviews", params={"limit": 0})
        assert response.status_code == 400

    def test_get_pending_review_as_stranger_returns_404(self, client, submit):
        review_id = submit()
        assert client.get(f"/reviews/{review_id}").status_code == 404

    def test_get_approved_review(self, client, submit, approve):
        review_id = approve(submit())["id"]
        response = client.get(f"/reviews/{review_id}")
        assert response.status_code == 200
        assert response.json()["id"] == review_id

    def test_product_reviews_default_to_load_more_page(self, client, submit, approve, product, make_customer):
        for index in range(6):
            approve(submit(identity=make_customer(user_id=f"cust-{index}")))

        response = client.get(f"/products/{product}/reviews")

        body = response.json()
        assert len(body["reviews"]) == 5
        assert body["pagination"] == {"total": 6, "page": 1, "pages": 2}

    def test_product_reviews_zero_limit_returns_400(self, client, product):
        response = client.get(f"/products/{product}/reviews", params={"limit": 0})
        assert response.status_code == 400

    def test_product_rating(self, client, submit, approve, product, other_customer):
        approve(submit(rating=5))
        approve(submit(identity=other_customer, rating=3))

        response = client.get(f"/products/{product}/rating")

        assert response.status_code == 200
        assert response.json() == {
            "product_id": product,
            "rating": 4.0,
            "num_reviews": 2,
            "breakdown": {"5": 1, "4": 0, "3": 1, "2": 0, "1": 0},
        }


class TestActionsAPI:
    def test_report_is_idempotent(self, client, submit, other_customer, headers_for, fake_email):
        review_id = submit()
        for _ in range(2):
            response = client.post(f"/reviews/{review_id}/report", json={"reason": "spam"}, headers=headers_for(other_customer))
            assert response.status_code == 200
            assert response.json()["reported"] is True
        assert len(fake_email.sent_to("reviews-ops@storefront.example")) == 1

    def test_report_without_body(self, client, submit, other_customer, headers_for):
        review_id = submit()
        response = client.post(f"/reviews/{review_id}/report", headers=headers_for(other_customer))
        assert response.status_code == 200

    def test_helpful_increments(self, client, submit, other_customer, headers_for):
        review_id = submit()
        client.post(f"/reviews/{review_id}/helpful", headers=headers_for(other_customer))
        response = client.post(f"/reviews/{review_id}/helpful", headers=headers_for(other_customer))
        assert response.status_code == 200
        assert response.json()["helpful_count"] == 2

    def test_helpful_requires_identity(self, client, submit):
        review_id = submit()
        assert client.post(f"/reviews/{review_id}/helpful").status_code == 401

    def test_delete_by_author(self, client, submit, author, headers_for):
        review_id = submit()
        response = client.delete(f"/reviews/{review_id}", headers=headers_for(author))
        assert response.status_code == 200
        assert response.json() == {"message": "Review deleted successfully"}

    def test_delete_by_stranger_returns_403(self, client, submit, other_customer, headers_for):
        review_id = submit()
        assert client.delete(f"/reviews/{review_id}", headers=headers_for(other_customer)).status_code == 403

    def test_delete_unknown_returns_404(self, client, author, headers_for):
        assert client.delete("/reviews/missing", headers=headers_for(author)).status_code == 404


class TestProductRegistrationAPI:
    def test_moderator_registers_product(self, client, mod, headers_for):
        response = client.put("/products/prod-200", json={"name": "Trail Runner 3"}, headers=headers_for(mod))
        assert response.status_code == 200
        assert response.json()["rating"] == 0.0

    def test_customer_cannot_register_product(self, client, author, headers_for):
        response = client.put("/products/prod-200", json={"name": "Trail Runner 3"}, headers=headers_for(author))
        assert response.status_code == 403


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
