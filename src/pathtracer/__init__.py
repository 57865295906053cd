"""Taichi-based Monte Carlo path tracer for axis-aligned scenes.

This package renders scenes made of axis-aligned rectangles, spheres and
boxes with diffuse and emissive materials, using next-event estimation
toward a rectangular area light.

Subpackages:
    core: Ray utilities, render configuration, the integrator and the render loop
    geometry: Shape primitives and their intersection routines
    materials: Lambertian and diffuse-light materials and their registry
    scene: The hittable list (world) and the Cornell box factory
    camera: Thin-lens camera with ray generation
    preview: Pixel buffer export
"""

__version__ = "0.1.0"
