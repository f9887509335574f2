"""Tests for the HTTP adapters of the collaborator ports.

``requests`` is patched at the module level; no network is involved.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests
from orders.clients import get_collaborators, http_collaborators, reset_collaborators
from orders.clients.http import HttpAddressBook, HttpCart, HttpCatalog, HttpInventory, HttpOffers, HttpWallet
from orders.clients.notifier import LoggingNotifier
from orders.config import ServiceEndpoints, override_settings


@pytest.fixture
def endpoints():
    return ServiceEndpoints(
        inventory_url="http://inventory",
        wallet_url="http://wallet",
        offers_url="http://offers",
        users_url="http://users",
        cart_url="http://cart/api/cart",
        catalog_url="http://catalog",
        timeout_seconds=3.0,
    )


def _response(status_code=200, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    response.content = b"{}" if body is not None else b""
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


class TestHttpInventory:
    def test_decrement(self, endpoints):
        with patch("orders.clients.http.requests.post", return_value=_response()) as post:
            HttpInventory(endpoints).decrement("prod-001", 2)
        post.assert_called_once_with(
            "http://inventory/api/master/inventory/prod-001/decrement", params={"qty": 2}, timeout=3.0
        )

    def test_errors_surface(self, endpoints):
        with patch("orders.clients.http.requests.post", return_value=_response(503)):
            with pytest.raises(requests.HTTPError):
                HttpInventory(endpoints).increment("prod-001", 1)


class TestHttpWallet:
    def test_pay(self, endpoints):
        body = {"success": True, "remainingBalance": "150.0", "message": "ok"}
        with patch("orders.clients.http.requests.post", return_value=_response(body=body)) as post:
            charge = HttpWallet(endpoints).pay("user-001", "order-1", 850.0)
        assert charge.success is True
        assert charge.balance == 150.0
        assert post.call_args.args[0] == "http://wallet/api/wallet/pay"
        assert post.call_args.kwargs["json"] == {"userId": "user-001", "orderId": "order-1", "amount": 850.0}

    def test_declined(self, endpoints):
        body = {"success": False, "message": "Insufficient wallet balance"}
        with patch("orders.clients.http.requests.post", return_value=_response(body=body)):
            charge = HttpWallet(endpoints).pay("user-001", "order-1", 850.0)
        assert charge.success is False
        assert charge.balance is None

    def test_credit(self, endpoints):
        with patch("orders.clients.http.requests.post", return_value=_response(body={"balance": 900})) as post:
            balance = HttpWallet(endpoints).credit("user-001", "order-1", 850.0, "Order cancellation", "ORDER_CANCELLED")
        assert balance == 900.0
        assert post.call_args.kwargs["json"]["source"] == "ORDER_CANCELLED"

    def test_credit_with_empty_body(self, endpoints):
        with patch("orders.clients.http.requests.post", return_value=_response()):
            assert HttpWallet(endpoints).credit("user-001", "order-1", 1.0, "r", "s") is None


class TestHttpOffers:
    def test_best_price(self, endpoints):
        body = {"finalPrice": 450.0, "discountAmount": 50.0}
        with patch("orders.clients.http.requests.post", return_value=_response(body=body)) as post:
            offer = HttpOffers(endpoints).best_price("prod-001", None, 500.0)
        assert offer.final_price == 450.0
        assert offer.discount_amount == 50.0
        assert post.call_args.kwargs["json"]["originalPrice"] == 500.0


class TestHttpAddressBook:
    def test_found(self, endpoints):
        body = {"id": 7, "addressLine1": "1 MG Road", "city": "Kochi", "state": "Kerala", "pincode": "682001"}
        with patch("orders.clients.http.requests.get", return_value=_response(body=body)) as get:
            address = HttpAddressBook(endpoints).get_by_id("7")
        assert address.id == "7"
        assert address.line1 == "1 MG Road"
        assert address.pincode == "682001"
        assert get.call_args.args[0] == "http://users/api/addresses/7"

    def test_not_found(self, endpoints):
        with patch("orders.clients.http.requests.get", return_value=_response(404)):
            assert HttpAddressBook(endpoints).get_by_id("7") is None


class TestHttpCart:
    def test_clear(self, endpoints):
        with patch("orders.clients.http.requests.delete", return_value=_response()) as delete:
            HttpCart(endpoints).clear("user-001")
        delete.assert_called_once_with(
            "http://cart/api/cart/user-001/clear", params={"orderComplete": "true"}, timeout=3.0
        )


class TestHttpCatalog:
    def test_public_endpoint_first(self, endpoints):
        body = {"title": "USB-C Hub", "price": 250, "imageNames": ["a.png", "b.png"]}
        with patch("orders.clients.http.requests.get", return_value=_response(body=body)) as get:
            product = HttpCatalog(endpoints).get_by_id("prod-001")
        assert product.title == "USB-C Hub"
        assert product.price == 250.0
        assert product.image_names == ("a.png", "b.png")
        assert get.call_count == 1

    def test_falls_back_to_admin_endpoint(self, endpoints):
        responses = [_response(404), _response(body={"title": "Hub", "imageName": "hub.png"})]
        with patch("orders.clients.http.requests.get", side_effect=responses) as get:
            product = HttpCatalog(endpoints).get_by_id("prod-001")
        assert product.image_names == ("hub.png",)
        assert get.call_args.args[0] == "http://catalog/api/admin/products/prod-001"

    def test_connection_errors_mean_unknown_product(self, endpoints):
        with patch("orders.clients.http.requests.get", side_effect=requests.ConnectionError("down")):
            assert HttpCatalog(endpoints).get_by_id("prod-001") is None


class TestCollaboratorRegistry:
    def test_fakes_by_default(self):
        reset_collaborators()
        assert type(get_collaborators().inventory).__name__ == "FakeInventory"

    def test_http_mode(self):
        override_settings(collaborators="http")
        reset_collaborators()
        collaborators = get_collaborators()
        assert isinstance(collaborators.wallet, HttpWallet)
        assert isinstance(collaborators.notifier, LoggingNotifier)

    def test_http_set_uses_settings_endpoints(self):
        override_settings(endpoints=ServiceEndpoints(wallet_url="http://wallet.internal"))
        assert http_collaborators().wallet.base_url == "http://wallet.internal"
