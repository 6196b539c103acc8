from contextlib import nullcontext as does_not_raise
from decimal import Decimal
from typing import Any

import pytest
from faker import Faker

from cart.schemas import CartLineCandidate

fake = Faker()


def exc_to_ctx_manager(exc: type[Exception] | None):
    return pytest.raises(exc) if exc else does_not_raise()


def new_candidate(**overrides: Any) -> CartLineCandidate:
    data: dict[str, Any] = {
        "product_id": fake.uuid4(),
        "name": fake.word().title(),
        "slug": fake.slug(),
        "price": Decimal(fake.random_int(1, 500)),
        "image": fake.image_url(),
        "sku": fake.bothify("SKU-####"),
    }
    data.update(overrides)
    return CartLineCandidate.model_validate(data)
