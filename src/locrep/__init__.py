"""
Localized Replication Engine (locrep)

Turns one master composition into one independent, fully relinked copy
per locale and writes localized text and assets into the copies.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - A particular host application (After Effects, Figma, ...)
    - Rendering or rasterization
    - Translation

Hosts are reached only through `locrep.host.HostDocument`.
Originals are never mutated; duplicates are only ever added.
"""

__version__ = "0.1.0"
