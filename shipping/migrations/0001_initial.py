from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ShippingMethod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("code", models.SlugField(max_length=40, unique=True)),
                ("name", models.CharField(max_length=120)),
                ("description", models.TextField(blank=True)),
                ("base_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("fee_per_kg", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("min_days", models.PositiveSmallIntegerField(default=1)),
                ("max_days", models.PositiveSmallIntegerField(default=3)),
                (
                    "provinces",
                    models.JSONField(blank=True, default=list, help_text="Supported provinces; empty means all"),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("sort_order", models.IntegerField(default=0)),
            ],
            options={
                "ordering": ["sort_order", "name"],
            },
        ),
    ]
