"""RegisterProduct — mirror a catalogue product into the Reviews domain.

Registering an already known product refreshes its name and slug and
leaves the rating fields untouched.
"""

from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.product.product import Product


@reviews.command(part_of="Product")
class RegisterProduct:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    slug = String(max_length=255)


@reviews.command_handler(part_of=Product)
class RegisterProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        repo = current_domain.repository_for(Product)
        try:
            product = repo.get(command.product_id)
            product.rename(command.name, command.slug)
        except ObjectNotFoundError:
            product = Product.register(
                product_id=command.product_id,
                name=command.name,
                slug=command.slug,
            )

        repo.add(product)
        return str(product.product_id)
