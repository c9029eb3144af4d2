import pytest

from kestrel.gpu import GPUInstance, GPUSettings


def _create_instance() -> GPUInstance:
    errors = []
    for backend in (None, "egl"):
        try:
            return GPUInstance.create(GPUSettings(backend=backend))
        except Exception as e:  # no display, no driver, missing backend
            errors.append(f"{backend or 'default'}: {e}")
    pytest.skip("No standalone OpenGL 3.3 context: " + "; ".join(errors))


@pytest.fixture(scope="session")
def gpu():
    """Headless GPU instance shared by every GPU-backed test. Skips without one."""
    instance = _create_instance()
    yield instance
    instance.release()
