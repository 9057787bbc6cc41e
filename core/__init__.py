"""Core of the LingoPaste client.

This package contains the remote paste clients, the per-paste translation cache, the view
controller, and the shared resources that wire them together.
"""

from core.shared_data import SharedData

__all__: list[str] = ["SharedData"]
