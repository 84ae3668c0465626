"""
CYLINDER / GAS LINKAGE RESOLUTION

Purpose: find the cylinder a gas sale went out in, or the gas inside a sold
full cylinder, when the caller did not say.

Resolution order (gas -> cylinder):
1. Explicit cylinder product id
2. Cylinder name with the words "cylinder"/"cylinders" removed is contained
   in the gas name
3. Any significant word of the gas name is contained in a cylinder name
4. No linkage

Resolution order (full cylinder -> gas):
1. Explicit gas product id
2. Name similarity (same two checks, mirrored)
3. Gas product with the same cylinder size
4. Gas product with the most stock, if enabled

Unmatched names return None and never raise. Candidates are scanned in id
order, so the first match wins on ties.
"""
import logging
import re
from typing import List, Optional

from sqlalchemy.orm import Session

from gasledger.core.config import settings
from gasledger.models.inventory_item import InventoryItem
from gasledger.models.product import CYLINDER, GAS, Product

logger = logging.getLogger(__name__)

CYLINDER_WORDS = re.compile(r"\bcylinders?\b", re.IGNORECASE)

# Unit and category words that appear in most names and match nothing useful
IGNORED_TOKENS = {"gas", "kg", "kgs", "lb", "lbs", "cylinder", "cylinders"}
MIN_TOKEN_LENGTH = 2


def strip_cylinder_words(name: str) -> str:
    """
    Examples:
        "Propane Cylinder" -> "propane"
        "Cylinders 5KG" -> "5kg"
    """
    if not name:
        return ""
    return " ".join(CYLINDER_WORDS.sub(" ", name.lower()).split())


def name_tokens(name: str) -> List[str]:
    """
    Significant lowercase words of a product name.

    Examples:
        "Gas-5kg" -> ["5kg"]
        "LPG Gas 45 kg" -> ["lpg", "45"]
    """
    if not name:
        return []
    words = re.split(r"[^a-z0-9]+", name.lower())
    return [w for w in words if len(w) >= MIN_TOKEN_LENGTH and w not in IGNORED_TOKENS]


def _products(db: Session, category: str) -> List[Product]:
    return db.query(Product).filter(Product.category == category).order_by(Product.id).all()


def _explicit(db: Session, product_id: Optional[int], role: str) -> Optional[Product]:
    if not product_id:
        return None
    product = db.get(Product, product_id)
    if product is None:
        logger.warning(f"[Linkage] Explicit {role} product {product_id} not found, falling back to name matching")
    return product


def _match_by_name(source: Product, candidates: List[Product], strip_source: bool) -> Optional[Product]:
    """
    Substring check, then token check.

    With strip_source=False the candidates are cylinders and the source is
    gas: each cylinder name (minus cylinder words) is looked for inside the
    gas name. With strip_source=True the roles swap.
    """
    source_name = (source.name or "").lower()

    if strip_source:
        remainder = strip_cylinder_words(source.name)
        if remainder:
            for candidate in candidates:
                if remainder in (candidate.name or "").lower():
                    return candidate
    else:
        for candidate in candidates:
            remainder = strip_cylinder_words(candidate.name)
            if remainder and remainder in source_name:
                return candidate

    tokens = name_tokens(source.name)
    if not tokens:
        return None
    for candidate in candidates:
        candidate_name = (candidate.name or "").lower()
        if any(token in candidate_name for token in tokens):
            return candidate
    return None


def resolve_cylinder_for_gas(
    db: Session,
    gas_product: Product,
    explicit_id: Optional[int] = None,
) -> Optional[Product]:
    """Cylinder product paired with a gas sale, or None."""
    explicit = _explicit(db, explicit_id, "cylinder")
    if explicit is not None:
        return explicit

    cylinder = _match_by_name(gas_product, _products(db, CYLINDER), strip_source=False)
    if cylinder is None:
        logger.warning(f"[Linkage] No cylinder matched gas product '{gas_product.name}'")
        return None

    logger.info(f"[Linkage] Matched gas '{gas_product.name}' -> cylinder '{cylinder.name}' by name")
    return cylinder


def _gas_stock(db: Session, product: Product) -> int:
    inventory_item = db.query(InventoryItem).filter(InventoryItem.product_id == product.id).first()
    if inventory_item is not None:
        return inventory_item.current_stock or 0
    return product.current_stock or 0


def resolve_gas_for_cylinder(
    db: Session,
    cylinder_product: Product,
    explicit_id: Optional[int] = None,
) -> Optional[Product]:
    """Gas product consumed by a full-cylinder sale, or None."""
    explicit = _explicit(db, explicit_id, "gas")
    if explicit is not None:
        return explicit

    gases = _products(db, GAS)
    if not gases:
        return None

    gas = _match_by_name(cylinder_product, gases, strip_source=True)
    if gas is not None:
        logger.info(f"[Linkage] Matched cylinder '{cylinder_product.name}' -> gas '{gas.name}' by name")
        return gas

    if cylinder_product.cylinder_size:
        for candidate in gases:
            if candidate.cylinder_size == cylinder_product.cylinder_size:
                logger.info(
                    f"[Linkage] Matched cylinder '{cylinder_product.name}' -> gas '{candidate.name}' "
                    f"by size {candidate.cylinder_size}"
                )
                return candidate

    if not settings.GAS_FALLBACK_ANY_STOCK:
        logger.warning(f"[Linkage] No gas matched cylinder '{cylinder_product.name}'")
        return None

    stocked = []
    for candidate in gases:
        stock = _gas_stock(db, candidate)
        if stock > 0:
            stocked.append((stock, candidate))
    if not stocked:
        logger.warning(f"[Linkage] No gas matched cylinder '{cylinder_product.name}' and none in stock")
        return None

    stocked.sort(key=lambda pair: pair[0], reverse=True)
    fallback = stocked[0][1]
    logger.warning(
        f"[Linkage] WEAK MATCH: cylinder '{cylinder_product.name}' -> gas '{fallback.name}' "
        f"chosen only for having the most stock ({stocked[0][0]})"
    )
    return fallback
