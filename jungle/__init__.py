"""Resource manifests, text textures, demo geometry and camera controls for a small game engine."""

__version__ = "0.1.0"

__all__ = ["entries", "manifest", "text", "geometry", "controls"]