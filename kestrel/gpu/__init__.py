# kestrel/gpu/__init__.py
from kestrel.gpu.instance import GPUInstance, gpu_instance, reset_gpu_instance
from kestrel.gpu.settings import GPUSettings

__all__ = ["GPUInstance", "GPUSettings", "gpu_instance", "reset_gpu_instance"]
