"""
Related product lookup through the Windows Installer automation interface.

``Installer.RelatedProducts(upgradeCode)`` wraps ``MsiEnumRelatedProducts``,
which reports products installed per-machine as well as per-user for the
current user. That is what lets an install find a previous release that was
installed in the other scope.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List


class RelatedProductsSource(ABC):
    @abstractmethod
    def related_products(self, upgrade_code: str) -> List[str]:
        """Product codes of installed products sharing ``upgrade_code``."""


class WindowsInstallerProducts(RelatedProductsSource):
    PROG_ID = "WindowsInstaller.Installer"

    def __init__(self, installer=None) -> None:
        self._installer = installer

    def _get_installer(self):
        if self._installer is None:
            import win32com.client  # pywin32, Windows only
            self._installer = win32com.client.Dispatch(self.PROG_ID)
        return self._installer

    def related_products(self, upgrade_code: str) -> List[str]:
        products = self._get_installer().RelatedProducts(upgrade_code)
        return [products.Item(i) for i in range(products.Count)]


def read_package_property(msi_path, name: str) -> str:
    """Read one row of an MSI package's Property table."""
    import msilib

    db = msilib.OpenDatabase(str(msi_path), msilib.MSIDBOPEN_READONLY)
    view = db.OpenView(f"SELECT `Value` FROM `Property` WHERE `Property`='{name}'")
    try:
        view.Execute(None)
        record = view.Fetch()
        return record.GetString(1) if record else ""
    finally:
        view.Close()
