"""Seed the minimum data a fresh POS install needs.

Creates the default branch and an administrator assigned to it, both taken
from settings (``POS_DEFAULT_BRANCH``, ``POS_ADMIN_EMAIL``,
``POS_ADMIN_PASSWORD``). With ``--demo`` a few categories and products are
provisioned through the catalog services so stock rows exist at every branch.
Re-running is idempotent; existing rows are reused by name/email.
"""

from branches.models import Branch
from catalog.models import Category, Product
from catalog.services import create_product
from common.choices import UserRole
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from users.actor import ActorContext

DEMO_CATALOG = [
    ("Drinks", "#2E86AB", [("Coffee", "2.50", "0.80", []), ("Orange juice", "3.00", "1.10", [])]),
    (
        "Clothing",
        "#A23B72",
        [("T-Shirt", "20.00", "8.50", [("Size", "M", "0.00"), ("Size", "XL", "2.00")])],
    ),
]


class Command(BaseCommand):
    help = "Seed the default branch and admin user (and optionally a demo catalog)"

    def add_arguments(self, parser):
        parser.add_argument("--demo", action="store_true", help="Also provision a small demo catalog")
        parser.add_argument("--stock", type=int, default=20, help="Initial stock for demo products")

    @transaction.atomic
    def handle(self, *args, **options):
        email = (settings.POS_ADMIN_EMAIL or "").strip().lower()
        password = settings.POS_ADMIN_PASSWORD
        if not email or not password:
            raise CommandError("POS_ADMIN_EMAIL and POS_ADMIN_PASSWORD must be set.")

        branch, created = Branch.objects.get_or_create(name=settings.POS_DEFAULT_BRANCH)
        self.stdout.write(f"Branch '{branch.name}' {'created' if created else 'exists'}.")

        User = get_user_model()
        admin = User.objects.filter(email=email).first()
        if admin is None:
            admin = User.objects.create_user(
                username=email, email=email, password=password, name="Administrator", role=UserRole.ADMIN, branch=branch
            )
            self.stdout.write(f"Admin '{email}' created.")
        else:
            self.stdout.write(f"Admin '{email}' exists.")

        if options["demo"]:
            self._seed_demo(ActorContext(user_id=admin.id, role=UserRole.ADMIN, branch_id=admin.branch_id), options["stock"])

        self.stdout.write(self.style.SUCCESS("POS seed complete."))

    def _seed_demo(self, actor, stock):
        for cat_name, color, products in DEMO_CATALOG:
            category, _ = Category.objects.get_or_create(name=cat_name, defaults={"color": color})
            for name, price, cost, variants in products:
                if Product.objects.filter(name=name, category=category).exists():
                    continue
                create_product(
                    actor=actor,
                    name=name,
                    price=price,
                    cost=cost,
                    category_id=category.id,
                    stock=stock,
                    color=color,
                    variants=[{"name": n, "value": v, "price_adjustment": adj} for n, v, adj in variants],
                )
                self.stdout.write(f"Product '{name}' provisioned.")
