from .related import RelatedProductsSource, WindowsInstallerProducts, read_package_property

__all__ = ["RelatedProductsSource", "WindowsInstallerProducts", "read_package_property"]
