"""
Device and random-stream management for population tensors.

Every phase of the engine is a vectorized torch operation over the whole
population, so the device decides where that work runs. The random stream is
an explicit ``torch.Generator`` bound to the same device; operators receive it
as an argument instead of drawing from torch's global state, which makes a
seeded run reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass

import torch

from evosolve.utils.logging import LogLevel, log_event


@dataclass
class DeviceInfo:
    """
    Information about a compute device.

    Attributes:
        device: PyTorch device object for tensor operations
        name: Human-readable device name (e.g., "NVIDIA RTX 4090")
        is_cuda: Whether this is a CUDA-capable GPU device
        total_memory: Total device memory in GB (None for CPU)
        cuda_capability: CUDA compute capability version (major, minor)
        threads: Intra-op threads torch uses on CPU
    """
    device: torch.device
    name: str
    is_cuda: bool
    total_memory: float | None = None  # GB
    cuda_capability: tuple[int, int] | None = None
    threads: int | None = None


def _cuda_is_usable() -> bool:
    """Check if CUDA is actually usable (not just available)."""
    if not torch.cuda.is_available():
        return False
    try:
        test_tensor = torch.zeros(1, device="cuda")
        del test_tensor
        return True
    except RuntimeError:
        return False


def get_device(preference: str = "cpu") -> torch.device:
    """
    Get the device to run the population on.

    Args:
        preference: One of "auto", "cuda", "cpu", or specific like "cuda:0"

    Returns:
        torch.device for the selected device
    """
    if preference == "auto":
        if _cuda_is_usable():
            return torch.device("cuda")
        return torch.device("cpu")
    elif preference.startswith("cuda"):
        if _cuda_is_usable():
            return torch.device(preference)
        log_event(
            "CUDA_UNAVAILABLE",
            level=LogLevel.MINIMAL,
            requested=preference,
            fallback="cpu",
        )
        return torch.device("cpu")
    else:
        return torch.device(preference)


def get_device_info(device: torch.device | str | None = None) -> DeviceInfo:
    """Get detailed information about a device."""
    if device is None:
        device = get_device("auto")
    elif isinstance(device, str):
        device = torch.device(device)

    if device.type == "cuda":
        idx = device.index if device.index is not None else 0
        props = torch.cuda.get_device_properties(idx)
        return DeviceInfo(
            device=device,
            name=props.name,
            is_cuda=True,
            total_memory=props.total_memory / 1e9,
            cuda_capability=(props.major, props.minor),
        )
    return DeviceInfo(
        device=device,
        name="CPU",
        is_cuda=False,
        threads=torch.get_num_threads(),
    )


def make_generator(seed: int | None = None, device: torch.device | str = "cpu") -> torch.Generator:
    """
    Create the random stream shared by all operators of one run.

    Args:
        seed: Fixed seed for reproducible runs. None draws a fresh seed.
        device: Device the generator must live on (must match the tensors)

    Returns:
        A seeded torch.Generator
    """
    generator = torch.Generator(device=device)
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(seed)
    return generator
