from decimal import Decimal

from django.core.management.base import BaseCommand

from products.models import Product


class Command(BaseCommand):
    help = "Seed a small demo catalog (discrete + weighed goods)"

    PRODUCTS = [
        # sku, name, category, price, cost, stock, unit, barcode
        ("MILK-1L", "Whole Milk 1L", "Dairy", "1.20", "0.80", "48", "unit", "5000112637922"),
        ("BREAD-WH", "White Bread", "Bakery", "2.10", "1.10", "25", "unit", "5010044000091"),
        ("EGGS-12", "Eggs (12)", "Dairy", "3.40", "2.20", "30", "unit", None),
        ("APL-RED", "Red Apples", "Produce", "5.00", "3.00", "10.000", "kg", None),
        ("BAN", "Bananas", "Produce", "1.99", "1.10", "18.500", "kg", None),
    ]

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products..."))

        created_count = 0
        for sku, name, category, price, cost, stock, unit, barcode in self.PRODUCTS:
            _, created = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "category": category,
                    "unit_price": Decimal(price),
                    "cost_price": Decimal(cost),
                    "stock": Decimal(stock),
                    "unit_of_measure": unit,
                    "barcode": barcode,
                },
            )
            created_count += int(created)

        self.stdout.write(self.style.SUCCESS(f"Seeded {created_count} new products."))
