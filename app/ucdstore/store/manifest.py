"""Store manifest (.ucd-store.json) I/O.

The store manifest sits at the store root and maps each declared version
to the UCD version that backs it. Its keys are the versions the store
manages.
"""

import json
import logging

from pydantic import TypeAdapter, ValidationError

from ucdstore.bridge.base import Capability, FileSystemBridge, assert_capability
from ucdstore.bridge.errors import BridgeError
from ucdstore.core.paths import STORE_MANIFEST_NAME
from ucdstore.store.errors import StoreManifestError
from ucdstore.utils.paths import join_store_path

logger = logging.getLogger(__name__)

_MANIFEST_ADAPTER = TypeAdapter(dict[str, str])


def get_store_manifest_path(base_path: str) -> str:
    """Path of the store manifest under a store root."""
    return join_store_path(base_path, STORE_MANIFEST_NAME)


async def read_store_manifest(bridge: FileSystemBridge, base_path: str) -> dict[str, str]:
    """Read the store manifest.

    Args:
        bridge: Bridge holding the store.
        base_path: Store root inside the bridge.

    Returns:
        Mapping of declared version to backing version.

    Raises:
        StoreManifestError: If the manifest is missing, unreadable or malformed.
    """
    manifest_path = get_store_manifest_path(base_path)

    try:
        raw = await bridge.read(manifest_path)
    except (BridgeError, OSError) as e:
        raise StoreManifestError(f"Store manifest could not be read: {manifest_path}") from e

    try:
        return _MANIFEST_ADAPTER.validate_python(json.loads(raw))
    except json.JSONDecodeError as e:
        raise StoreManifestError(f"Store manifest is not valid JSON: {manifest_path}") from e
    except ValidationError as e:
        raise StoreManifestError(f"Store manifest has an invalid shape: {e}") from e


async def store_manifest_exists(bridge: FileSystemBridge, base_path: str) -> bool:
    """Check whether a store manifest is present."""
    return await bridge.exists(get_store_manifest_path(base_path))


async def write_store_manifest(
    bridge: FileSystemBridge,
    base_path: str,
    versions: dict[str, str],
) -> None:
    """Write the store manifest as pretty-printed JSON.

    Args:
        bridge: Bridge holding the store.
        base_path: Store root inside the bridge.
        versions: Mapping of declared version to backing version.

    Raises:
        BridgeUnsupportedOperation: If the bridge cannot write.
    """
    assert_capability(bridge, Capability.WRITE, "write_store_manifest")
    manifest_path = get_store_manifest_path(base_path)
    logger.debug("Writing store manifest with %d version(s) to %s", len(versions), manifest_path)
    await bridge.write(manifest_path, json.dumps(dict(sorted(versions.items())), indent=2) + "\n")
