from .results import ActionResult
from .upgrade import UPGRADE_PROPERTIES, find_all_related_products, find_related_product_codes
from .layers import LayerStatus, layer_status, reorder_layers, reorder_ultraleap_layer

__all__ = [
    "ActionResult",
    "UPGRADE_PROPERTIES",
    "find_all_related_products",
    "find_related_product_codes",
    "LayerStatus",
    "layer_status",
    "reorder_layers",
    "reorder_ultraleap_layer",
]
