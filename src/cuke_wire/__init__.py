from importlib.metadata import version, PackageNotFoundError


try:
    __version__ = version('cuke-wire')
except PackageNotFoundError:
    __version__ = 'unknown'
