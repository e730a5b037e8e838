"""Repository for the Order aggregate: lookups, listings and admin statistics."""

from datetime import datetime

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.status import OrderStatus
from storefront.shared.pagination import paginate

_BATCH_SIZE = 100


@storefront.repository(part_of=Order)
class OrderRepository:
    def find(self, order_id) -> Order | None:
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            return None

    def find_by_order_number(self, order_number) -> Order | None:
        orders = self._dao.query.filter(order_number=order_number).all().items
        return orders[0] if orders else None

    def order_number_exists(self, order_number) -> bool:
        return self.find_by_order_number(order_number) is not None

    def list_for_customer(self, customer_id, page=1, limit=10):
        """A customer's own orders, newest first."""
        return paginate(self._dao.query.filter(customer_id=str(customer_id)).order_by("-created_at"), page, limit)

    def list_orders(self, status=None, payment_status=None, page=1, limit=20):
        criteria = {}
        if status:
            criteria["order_status"] = status
        if payment_status:
            criteria["payment_status"] = payment_status

        queryset = self._dao.query.filter(**criteria) if criteria else self._dao.query
        return paginate(queryset.order_by("-created_at"), page, limit)

    def _iter_orders(self, **criteria):
        offset = 0
        while True:
            queryset = self._dao.query.filter(**criteria) if criteria else self._dao.query
            results = queryset.order_by("created_at").offset(offset).limit(_BATCH_SIZE).all()
            yield from results.items
            offset += _BATCH_SIZE
            if offset >= results.total:
                break

    def stats(self, now: datetime) -> dict:
        """Order counts and revenue by status, plus today's orders since local midnight of ``now``."""
        by_status = {}
        for order in self._iter_orders():
            bucket = by_status.setdefault(order.order_status, {"status": order.order_status, "count": 0, "total_revenue": 0.0})
            bucket["count"] += 1
            bucket["total_revenue"] += order.total

        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        todays = list(self._iter_orders(created_at__gte=day_start))

        return {
            "by_status": sorted(by_status.values(), key=lambda bucket: bucket["status"]),
            "today": {
                "orders": len(todays),
                "revenue": sum(order.total for order in todays),
            },
        }

    def delivered_order_with(self, customer_id, product_id) -> Order | None:
        """The customer's first Delivered order that contains ``product_id``, if any."""
        for order in self._iter_orders(customer_id=str(customer_id), order_status=OrderStatus.DELIVERED.value):
            if any(str(item.product_id) == str(product_id) for item in order.items):
                return order
        return None
