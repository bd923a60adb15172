"""RatingAggregator — keeps a product's displayed rating in line with its approved reviews.

Always a full recompute over the approved set rather than a running
average, so repeated updates never accumulate floating-point drift. The
workflow calls it explicitly after every change that can alter the
approved set; the write is not transactional with that change.
"""

from decimal import ROUND_HALF_UP, Decimal

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from reviews.errors import NotFound
from reviews.product.product import Product
from reviews.review.review import Review

logger = structlog.get_logger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def average_rating(scores) -> float:
    """Mean of ``scores`` rounded half-up to one decimal place; 0 when empty."""
    scores = list(scores)
    if not scores:
        return 0.0
    mean = Decimal(sum(scores)) / Decimal(len(scores))
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def _registered_product_ids():
    query = current_domain.repository_for(Product)._dao.query.order_by("product_id")
    offset = 0
    while True:
        result = query.offset(offset).limit(200).all()
        yield from (str(product.product_id) for product in result.items)
        offset += len(result.items)
        if not result.items or offset >= result.total:
            return


class RatingAggregator:
    def recompute(self, product_id) -> tuple[float, int]:
        """Recompute and persist ``(rating, num_reviews)`` for one product."""
        scores = current_domain.repository_for(Review).approved_ratings(product_id)
        rating, count = average_rating(scores), len(scores)

        repo = current_domain.repository_for(Product)
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError as exc:
            raise NotFound(f"Product {product_id} not found", product_id=str(product_id)) from exc

        product.record_rating(rating, count)
        repo.add(product)

        logger.info(
            "Product rating recomputed",
            product_id=str(product_id),
            rating=rating,
            num_reviews=count,
        )
        return rating, count

    def recompute_all(self) -> dict[str, tuple[float, int]]:
        """Recompute every product, including ones whose reviews were all deleted."""
        product_ids = current_domain.repository_for(Review).reviewed_product_ids()
        product_ids.update(_registered_product_ids())

        results = {}
        for product_id in sorted(product_ids):
            try:
                results[product_id] = self.recompute(product_id)
            except NotFound:
                logger.warning("Reviews reference an unknown product", product_id=product_id)
        return results
