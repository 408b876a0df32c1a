"""Offline stochastic ray tracer for sphere scenes, built on Taichi.

Supports:
- Iterative path tracing with a bounded bounce depth
- Lambertian, metal and dielectric materials
- Sphere primitives in a closest-hit scene aggregate
- Jittered multi-sample anti-aliasing with reproducible random streams

Subpackages:
    core: Vector math, random sampling, the integrator and the renderer
    geometry: Sphere primitive and its intersection routine
    materials: Scattering models
    scene: Scene storage, closest-hit queries and scene configuration
    camera: Pinhole camera with ray generation
    output: Image encoders (PPM, PNG)
"""

__version__ = "0.1.0"
