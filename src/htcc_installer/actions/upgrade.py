"""
Cross-scope upgrade detection.

Older HTCC releases were packaged per-user, newer ones per-machine. The
engine's own FindRelatedProducts only sees products in the scope of the
current install, so a previous release in the other scope would be left
behind. This action looks across both scopes and publishes what it finds
into the properties the engine's upgrade machinery already consumes.
"""

from __future__ import annotations

from typing import List

from htcc_installer.actions.results import ActionResult
from htcc_installer.products import RelatedProductsSource
from htcc_installer.session import Session

UPGRADE_PROPERTIES = ("WIX_UPGRADE_DETECTED", "MIGRATE", "UPGRADINGPRODUCTCODE")


def find_related_product_codes(products: RelatedProductsSource, upgrade_code: str, product_code: str) -> List[str]:
    """
    Return the product codes sharing ``upgrade_code``, minus ``product_code``.

    The in-progress product must never be reported: a repair or re-run would
    otherwise target itself for removal mid-install.
    """
    current = product_code.upper()
    return [code for code in products.related_products(upgrade_code) if code.upper() != current]


def find_all_related_products(session: Session, products: RelatedProductsSource) -> ActionResult:
    """Publish the first related product into the upgrade properties. Never fails."""
    upgrade_code = session.query_upgrade_code()
    product_code = session.query_product_code()

    try:
        packages = find_related_product_codes(products, upgrade_code, product_code)
    except Exception as e:
        # A missed upgrade leaves a stale install behind; aborting setup is worse
        session.log(f"Unable to enumerate products related to {upgrade_code}: {e}")
        packages = []

    if packages:
        it = packages[0]
        for name in UPGRADE_PROPERTIES:
            session.set_property(name, it)
        session.log(f"Found related product {it}")

    return ActionResult.SUCCESS
