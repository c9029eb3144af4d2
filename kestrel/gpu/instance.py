# kestrel/gpu/instance.py
from __future__ import annotations

import threading
from typing import Optional

import moderngl

from kestrel.gpu.settings import GPUSettings
from kestrel.graphics.shaders.program_types import ProgramHandle
from kestrel.graphics.shaders.shader_manager import ShaderManager, ShaderRequest


class GPUInstance:
    """
    Stores an active GL context and the shader cache compiled against it.

    ModernGL contexts are bound to the thread that created them; all GPU work
    through one instance must stay on that thread.
    """

    def __init__(
        self,
        ctx: moderngl.Context,
        *,
        settings: GPUSettings | None = None,
    ) -> None:
        self.settings = settings or GPUSettings()
        self.ctx = ctx
        self.shader_manager = ShaderManager(
            ctx, include_paths=self.settings.include_paths
        )

    @classmethod
    def create(cls, settings: GPUSettings | None = None) -> GPUInstance:
        settings = settings or GPUSettings()

        kwargs = {}
        if settings.backend:
            kwargs["backend"] = settings.backend

        ctx = moderngl.create_context(
            standalone=True, require=settings.require, **kwargs
        )

        version = ctx.version_code
        renderer = ctx.info.get("GL_RENDERER", "unknown")
        print(f"[GPU] OpenGL context created: {version // 100}.{(version % 100) // 10} ({renderer})")

        return cls(ctx, settings=settings)

    def program(self, req: ShaderRequest) -> moderngl.Program:
        handle: ProgramHandle = self.shader_manager.get(req)
        return handle.program

    def release(self) -> None:
        self.shader_manager.release()
        self.ctx.release()


_instance: Optional[GPUInstance] = None
_instance_lock = threading.Lock()


def gpu_instance(settings: GPUSettings | None = None) -> GPUInstance:
    """
    Gets or initializes the process-wide GPU instance.

    `settings` only applies to the first call; later calls return the
    existing instance unchanged.
    """
    global _instance

    with _instance_lock:
        if _instance is None:
            _instance = GPUInstance.create(settings)
        return _instance


def reset_gpu_instance() -> None:
    """Release the process-wide instance; the next gpu_instance() recreates it."""
    global _instance

    with _instance_lock:
        if _instance is not None:
            _instance.release()
            _instance = None
