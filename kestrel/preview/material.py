# kestrel/preview/material.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import moderngl

from kestrel.errors import PreviewError
from kestrel.gpu.instance import GPUInstance
from kestrel.preview.image import RenderImage
from kestrel.preview.types import MaterialTextureUsage
from kestrel.texture.image import Image


class RenderMaterial:
    """
    Previews a material one image at a time.

    Images that cannot be previewed keep their slot so the index still
    matches the caller's list; `is_error` reports them.
    """

    def __init__(
        self,
        instance: GPUInstance,
        images: Sequence[Tuple[MaterialTextureUsage, Image]],
    ) -> None:
        self.images: List[Tuple[Optional[RenderImage], MaterialTextureUsage]] = []
        for usage, image in images:
            try:
                render = RenderImage(instance, image)
            except PreviewError as e:
                print(f"[PREVIEW] Skipping {usage} image: {e}")
                render = None
            self.images.append((render, usage))

        self.index = 0

    def __len__(self) -> int:
        return len(self.images)

    def is_empty(self) -> bool:
        return not self.images

    @property
    def current(self) -> Optional[RenderImage]:
        if self.is_empty():
            return None
        return self.images[self.index][0]

    def is_error(self) -> bool:
        return not self.is_empty() and self.current is None

    @property
    def width(self) -> int:
        current = self.current
        return current.width if current is not None else 0

    @property
    def height(self) -> int:
        current = self.current
        return current.height if current is not None else 0

    @property
    def usage(self) -> str:
        if self.is_empty():
            return str(MaterialTextureUsage.UNKNOWN)
        return str(self.images[self.index][1])

    @property
    def srgb(self) -> bool:
        current = self.current
        return current.srgb if current is not None else False

    def next(self) -> None:
        if self.is_empty():
            return
        self.index = (self.index + 1) % len(self.images)

    def draw(self, ctx: moderngl.Context) -> None:
        current = self.current
        if current is not None:
            current.draw(ctx)

    def release(self) -> None:
        for render, _ in self.images:
            if render is not None:
                render.release()
