"""Cornell box scene built entirely from spheres.

This module provides the fixed scene rendered by the tracer: a box whose
walls are the visible caps of six huge spheres, a mirror sphere, a glass
sphere and a light that is the bottom cap of a large emissive sphere poking
through the ceiling.

The coordinate system places the box interior roughly in:
- X-axis: 1 (left wall) to 99 (right wall)
- Y-axis: 0 (floor) to 81.6 (ceiling)
- Z-axis: 0 (back wall) to 170 (front wall, behind the camera)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.smallpt.scene.cornell_box import create_cornell_box_scene
    >>> from src.smallpt.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_cornell_box_scene()
    >>> setup_camera(camera, 1024, 768)
    >>> # Now render using the scene and camera
"""

from src.smallpt.camera.pinhole import PinholeCamera
from src.smallpt.scene.manager import MaterialKind, SceneManager, SphereInfo

# =============================================================================
# Cornell Box Constants
# =============================================================================

# Radius of the spheres that act as flat walls
WALL_RADIUS = 1e5

BLACK = (0.0, 0.0, 0.0)
RED_WALL_COLOR = (0.75, 0.25, 0.25)
BLUE_WALL_COLOR = (0.25, 0.25, 0.75)
WHITE_WALL_COLOR = (0.75, 0.75, 0.75)
MIRROR_COLOR = (0.999, 0.999, 0.999)
LIGHT_EMISSION = (12.0, 12.0, 12.0)

# Camera looking into the box through the front wall
CAMERA_ORIGIN = (50.0, 52.0, 295.6)
CAMERA_DIRECTION = (0.0, -0.042612, -1.0)
CAMERA_FOV = 0.5135

CORNELL_BOX_SPHERES: tuple[SphereInfo, ...] = (
    SphereInfo(WALL_RADIUS, (WALL_RADIUS + 1.0, 40.8, 81.6), BLACK, RED_WALL_COLOR,
               MaterialKind.DIFFUSE, "Left"),
    SphereInfo(WALL_RADIUS, (-WALL_RADIUS + 99.0, 40.8, 81.6), BLACK, BLUE_WALL_COLOR,
               MaterialKind.DIFFUSE, "Right"),
    SphereInfo(WALL_RADIUS, (50.0, 40.8, WALL_RADIUS), BLACK, WHITE_WALL_COLOR,
               MaterialKind.DIFFUSE, "Back"),
    SphereInfo(WALL_RADIUS, (50.0, 40.8, -WALL_RADIUS + 170.0), BLACK, BLACK,
               MaterialKind.DIFFUSE, "Front"),
    SphereInfo(WALL_RADIUS, (50.0, WALL_RADIUS, 81.6), BLACK, WHITE_WALL_COLOR,
               MaterialKind.DIFFUSE, "Floor"),
    SphereInfo(WALL_RADIUS, (50.0, -WALL_RADIUS + 81.6, 81.6), BLACK, WHITE_WALL_COLOR,
               MaterialKind.DIFFUSE, "Ceil"),
    SphereInfo(16.5, (27.0, 16.5, 47.0), BLACK, MIRROR_COLOR,
               MaterialKind.SPECULAR, "Mirror Sphere"),
    SphereInfo(16.5, (73.0, 16.5, 78.0), BLACK, MIRROR_COLOR,
               MaterialKind.REFRACTIVE, "Glass Sphere"),
    SphereInfo(600.0, (50.0, 681.6 - 0.27, 81.6), LIGHT_EMISSION, BLACK,
               MaterialKind.DIFFUSE, "Light"),
)


# =============================================================================
# Cornell Box Factory
# =============================================================================


def create_cornell_box_camera(fov: float = CAMERA_FOV) -> PinholeCamera:
    """Create the camera looking into the Cornell box.

    Args:
        fov: Field-of-view factor. Default is 0.5135.

    Returns:
        A PinholeCamera placed in front of the box.
    """
    return PinholeCamera(origin=CAMERA_ORIGIN, direction=CAMERA_DIRECTION, fov=fov)


def create_cornell_box_scene(fov: float = CAMERA_FOV) -> tuple[SceneManager, PinholeCamera]:
    """Create the Cornell box scene and its camera.

    Clears any existing scene data and uploads the nine spheres of
    CORNELL_BOX_SPHERES in order, so sphere indices match that tuple.

    Args:
        fov: Field-of-view factor passed to the camera.

    Returns:
        A tuple of (SceneManager, PinholeCamera).

    Example:
        >>> scene, camera = create_cornell_box_scene()
        >>> print(f"Scene has {scene.get_sphere_count()} spheres")
        Scene has 9 spheres
    """
    scene = SceneManager()
    scene.add_spheres(CORNELL_BOX_SPHERES)
    return scene, create_cornell_box_camera(fov)
