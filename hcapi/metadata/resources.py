"""Access to data files bundled in the ``hcapi.data`` package."""

from importlib import resources

DATA_PACKAGE = "hcapi.data"


def read_data_text(name: str) -> str:
    """Return the UTF-8 text of a bundled data file."""
    return resources.files(DATA_PACKAGE).joinpath(name).read_text(encoding="utf-8")
