"""uccmake - build driver for UnrealScript modules compiled with `ucc make`."""

__version__ = "0.1.0"
