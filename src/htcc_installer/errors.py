class HTCCInstallerError(Exception):
    """Base class for errors raised while building or running the installer."""


class VersionDescriptorError(HTCCInstallerError):
    pass


class RegFileError(HTCCInstallerError):
    pass


class SigningError(HTCCInstallerError):
    pass


class MsiBuildError(HTCCInstallerError):
    pass
