import factory
from catalog.models import Category, Product, ProductVariant
from factory import Faker
from factory.django import DjangoModelFactory


class CategoryFactory(DjangoModelFactory):
    class Meta:
        model = Category

    name = Faker("word")
    slug = factory.Sequence(lambda n: f"category-{n}")
    is_active = True


class ProductFactory(DjangoModelFactory):
    class Meta:
        model = Product

    title = Faker("sentence", nb_words=3)
    slug = factory.Sequence(lambda n: f"product-{n}")
    description = Faker("paragraph")
    status = Product.STATUS_PUBLISHED


class ProductVariantFactory(DjangoModelFactory):
    class Meta:
        model = ProductVariant

    product = factory.SubFactory(ProductFactory)
    sku = factory.Sequence(lambda n: f"SKU-{n:05d}")
    price = factory.Faker("pydecimal", left_digits=5, right_digits=2, positive=True, min_value=1000)
    stock_qty = 10
    weight = 500
    is_active = True
