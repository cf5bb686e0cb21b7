"""lspsample – minimal example Language Server."""
try:
    from importlib.metadata import version, PackageNotFoundError
    try:
        __version__ = version('lspsample')
    except PackageNotFoundError:
        __version__ = '0.0.0.dev0'
except ImportError:
    __version__ = '0.0.0.dev0'
