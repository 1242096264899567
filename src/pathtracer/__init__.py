"""CPU progressive path tracer built on Taichi.

This package renders small scenes of spheres and planes on the CPU, one frame
per host tick, and averages successive frames into a running mean:
- Single-hit shading with next event estimation toward point lights
- Weighted reservoir sampling to pick one light per pixel
- Row-parallel frame kernel with a per-frame barrier
- Progressive accumulation that restarts on any scene, camera or size change

Subpackages:
    core: Rays, configuration, reservoir sampling, shading kernel and frame loop
    geometry: Sphere and plane primitives with their intersection routines
    materials: Surface materials and point lights
    scene: Scene container and preset scenes
    camera: Pinhole camera producing per-pixel ray directions
    preview: PNG export of rendered frames
"""

__version__ = "0.1.0"
