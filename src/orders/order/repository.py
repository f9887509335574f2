"""Repository for the Order aggregate."""

from orders.domain import orders
from orders.order.order import Order


@orders.repository(part_of=Order)
class OrderRepository:
    """Order lookups beyond ``get`` by id."""

    def find_by_order_number(self, order_number: str) -> Order | None:
        """Find an order by its human-facing number, ignoring case."""
        if not order_number or not order_number.strip():
            return None
        return self._dao.query.filter(order_number=order_number.strip().upper()).all().first

    def find_for_user(self, user_id, offset: int = 0, limit: int = 20):
        """Orders placed by one customer, newest first."""
        return self._dao.query.filter(user_id=user_id).order_by("-created_at").offset(offset).limit(limit).all()

    def search(self, status: str | None = None, number_fragment: str | None = None, offset: int = 0, limit: int = 20):
        """Orders for the admin list, newest first, optionally narrowed by status and order number."""
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        if number_fragment and number_fragment.strip():
            query = query.filter(order_number__contains=number_fragment.strip().upper())
        return query.order_by("-created_at").offset(offset).limit(limit).all()
