"""Scene manager for building and uploading sphere scenes.

This module provides the high-level scene API. It owns the Python-side record
of every sphere (including its diagnostic label), validates sphere data before
it reaches the Taichi fields used by the intersector, and exposes the closed
set of material kinds the radiance estimator dispatches on.

The SceneManager maintains:
- An ordered list of immutable SphereInfo records
- The GPU copy of the same spheres in the scene intersection fields
- Human-readable descriptions of the scene for logging

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.smallpt.scene.manager import MaterialKind, SceneManager
    >>> scene = SceneManager()
    >>> scene.add_sphere(
    ...     radius=16.5,
    ...     position=(27.0, 16.5, 47.0),
    ...     color=(0.999, 0.999, 0.999),
    ...     material=MaterialKind.SPECULAR,
    ...     label="Mirror Sphere",
    ... )
    0
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum

from src.smallpt.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)

Color = tuple[float, float, float]


class MaterialKind(IntEnum):
    """Closed set of surface responses.

    Used for material dispatch in the radiance estimator.
    """

    DIFFUSE = 0
    SPECULAR = 1
    REFRACTIVE = 2


def _check_vector(name: str, value: tuple[float, float, float]) -> None:
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    if not all(math.isfinite(c) for c in value):
        raise ValueError(f"{name} = {value} has non-finite components")


@dataclass(frozen=True)
class SphereInfo:
    """An immutable sphere record.

    Attributes:
        radius: The radius of the sphere (positive).
        position: The center of the sphere.
        emission: Radiance emitted uniformly in all directions. Zero for
            surfaces that are not lights.
        color: Per-channel albedo in [0, 1].
        material: How the surface scatters light.
        label: Diagnostic name, not used when tracing.
    """

    radius: float
    position: tuple[float, float, float]
    emission: Color = (0.0, 0.0, 0.0)
    color: Color = (0.0, 0.0, 0.0)
    material: MaterialKind = MaterialKind.DIFFUSE
    label: str = ""

    def __post_init__(self) -> None:
        if not (math.isfinite(self.radius) and self.radius > 0.0):
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        _check_vector("position", self.position)
        _check_vector("emission", self.emission)
        _check_vector("color", self.color)
        if any(c < 0.0 for c in self.emission):
            raise ValueError(f"Emission {self.emission} must be non-negative")
        if any(c < 0.0 or c > 1.0 for c in self.color):
            raise ValueError(
                f"Color {self.color} is outside [0, 1]. "
                "Albedo components must be in [0, 1] for energy conservation."
            )
        # Accept plain ints for the material
        object.__setattr__(self, "material", MaterialKind(self.material))

    def describe(self) -> str:
        """Return a one-line description: label, emission, color and kind."""
        return f"{self.label} e:{self.emission} c:{self.color} {self.material.name}"


class SceneManager:
    """Builds a sphere scene and keeps the intersector fields in sync.

    Creating a SceneManager clears the global scene storage, so at most one
    manager describes the scene at any time.

    Attributes:
        spheres: SphereInfo records in upload order. A sphere's position in
            this list is its index in the intersector fields.

    Example:
        >>> scene = SceneManager()
        >>> scene.add_sphere(600.0, (50.0, 681.33, 81.6), emission=(12.0, 12.0, 12.0))
        0
        >>> scene.get_sphere_count()
        1
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere, both the local records and the Taichi fields."""
        clear_scene()
        self.spheres.clear()

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add(self, sphere: SphereInfo) -> int:
        """Upload a prepared sphere record.

        Args:
            sphere: The sphere to add.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        index = add_sphere(
            sphere.radius,
            sphere.position,
            sphere.emission,
            sphere.color,
            int(sphere.material),
        )
        self.spheres.append(sphere)
        logger.debug("Added sphere %d: %s", index, sphere.describe())
        return index

    def add_sphere(
        self,
        radius: float,
        position: tuple[float, float, float],
        emission: Color = (0.0, 0.0, 0.0),
        color: Color = (0.0, 0.0, 0.0),
        material: MaterialKind = MaterialKind.DIFFUSE,
        label: str = "",
    ) -> int:
        """Add a sphere to the scene.

        Args:
            radius: The radius of the sphere (must be positive).
            position: The center point of the sphere as (x, y, z).
            emission: Emitted radiance as (R, G, B), non-negative.
            color: Albedo as (R, G, B), each component in [0, 1].
            material: The material kind of the surface.
            label: Diagnostic name of the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If the sphere data is invalid.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        sphere = SphereInfo(
            radius=radius,
            position=position,
            emission=emission,
            color=color,
            material=material,
            label=label,
        )
        return self.add(sphere)

    def add_spheres(self, spheres: Iterable[SphereInfo]) -> list[int]:
        """Upload several sphere records in order.

        Returns:
            The indices of the added spheres.
        """
        indices = [self.add(sphere) for sphere in spheres]
        logger.info("Scene holds %d spheres", self.get_sphere_count())
        return indices

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_sphere(self, index: int) -> SphereInfo | None:
        """Get a sphere record by index, or None if it does not exist."""
        if 0 <= index < len(self.spheres):
            return self.spheres[index]
        return None

    def find(self, label: str) -> int | None:
        """Get the index of the first sphere with the given label."""
        for index, sphere in enumerate(self.spheres):
            if sphere.label == label:
                return index
        return None

    def describe(self) -> list[str]:
        """Describe every sphere, one line each, in index order."""
        return [sphere.describe() for sphere in self.spheres]

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES
