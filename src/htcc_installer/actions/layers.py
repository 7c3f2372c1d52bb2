"""
OpenXR API Layer Ordering

The OpenXR loader activates implicit API layers in registry enumeration
order. HTCC consumes hand tracking data, and the Ultraleap layer provides it,
so Ultraleap must be enumerated after HTCC; otherwise HTCC sits below the
layer that supplies its input and sees no hands.

``reorder_ultraleap_layer`` is the elevated post-registry custom action that
fixes the order. ``layer_status`` reports the order without changing it.

Example:
    from htcc_installer.registry import InMemoryApiLayerStore
    from htcc_installer.session import PropertyBag

    store = InMemoryApiLayerStore.with_layers(key_path, [(r"C:\\U\\UltraleapHandTracking.json", 0),
                                                          (r"C:\\HTCC\\APILayer.json", 0)])
    reorder_ultraleap_layer(PropertyBag(), store)
"""

from __future__ import annotations

import os
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from htcc_installer.actions.results import ActionResult
from htcc_installer.config import DEFAULT_CONFIG, InstallerConfig
from htcc_installer.registry import ApiLayerStore
from htcc_installer.session import Session


class LayerStatus(Enum):
    NOT_FOUND = "not-found"
    HTCC_FIRST = "htcc-first"
    ULTRALEAP_FIRST = "ultraleap-first"
    DISABLED_IN_REGISTRY = "disabled-in-registry"
    DISABLED_BY_ENVIRONMENT_VARIABLE = "disabled-by-environment-variable"


def reorder_layers(store: ApiLayerStore, key_path: str, suffix: str) -> List[str]:
    """
    Move every value whose name ends with ``suffix`` to the end of the key.

    Returns the names that were moved; an absent key moves nothing. Running
    it again is a no-op in effect, since the moved values are already last.
    """
    key = store.open(key_path)
    if key is None:
        return []

    moved = []
    with key:
        for name in key.value_names():
            if not name.endswith(suffix):
                continue
            key.move_to_end(name)
            moved.append(name)
    return moved


def reorder_ultraleap_layer(session: Session, store: ApiLayerStore,
                            config: InstallerConfig = DEFAULT_CONFIG) -> ActionResult:
    try:
        moved = reorder_layers(store, config.api_layers_key, config.ultraleap_layer_suffix)
    except Exception as e:
        session.log(f"Exception reordering Ultraleap layer: {e}")
        return ActionResult.FAILURE

    if moved:
        session.log(f"Moved {len(moved)} Ultraleap layer(s) to the end of {config.api_layers_key}")
    else:
        session.log("Ultraleap layer not registered; nothing to reorder")
    return ActionResult.SUCCESS


def layer_status(store: ApiLayerStore, own_manifest_path: str,
                 config: InstallerConfig = DEFAULT_CONFIG,
                 environ: Optional[Mapping[str, str]] = None) -> Tuple[LayerStatus, Optional[str]]:
    """
    Work out whether the Ultraleap layer will feed HTCC.

    Returns the status and the Ultraleap manifest path (None if not found).
    A disabled Ultraleap registration does not end the scan, since another
    enabled registration may follow it.
    """
    environ = os.environ if environ is None else environ

    key = store.open(config.api_layers_key, writable=False)
    if key is None:
        return LayerStatus.NOT_FOUND, None

    status = LayerStatus.NOT_FOUND
    ultraleap_path = None
    have_htcc = False
    own = own_manifest_path.casefold()

    with key:
        for name in key.value_names():
            if name.casefold() == own:
                have_htcc = True
                continue
            if not name.endswith(config.ultraleap_layer_suffix):
                continue

            disabled = key.read(name).data
            if not isinstance(disabled, int):
                continue

            ultraleap_path = name
            if disabled:
                status = LayerStatus.DISABLED_IN_REGISTRY
                continue

            if config.ultraleap_disable_env in environ:
                return LayerStatus.DISABLED_BY_ENVIRONMENT_VARIABLE, ultraleap_path

            if have_htcc:
                return LayerStatus.HTCC_FIRST, ultraleap_path
            return LayerStatus.ULTRALEAP_FIRST, ultraleap_path

    return status, ultraleap_path
