# kestrel/graphics/resources/__init__.py
from kestrel.graphics.resources.texture import GPUTexture

__all__ = ["GPUTexture"]
