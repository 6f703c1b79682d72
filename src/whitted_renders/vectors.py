"""
Vector algebra for the Whitted renderer.

Vectors are float64 NumPy arrays whose last axis has length 3. Every function
here broadcasts over leading axes, so the same call works for a single (3,)
vector and for an (N, 3) batch of rays.
"""
import numpy as np
from whitted_renders import constants

NORMALIZE_EPSILON = 1e-12

# Direction returned by refract() under total internal reflection
TIR_SENTINEL = np.array([1.0, 0.0, 0.0])


def dot(u, v):
    """Dot product along the last axis."""
    return np.sum(np.asarray(u) * np.asarray(v), axis=-1)


def norm(v):
    """Euclidean length along the last axis."""
    return np.sqrt(dot(v, v))


def normalize(v):
    """
    Scale vectors to unit length.

    Vectors shorter than NORMALIZE_EPSILON are returned unchanged rather
    than divided by (almost) zero.
    """
    v = np.asarray(v, dtype=float)
    length = np.expand_dims(norm(v), -1)
    safe = length > NORMALIZE_EPSILON
    return np.where(safe, v / np.where(safe, length, 1.0), v)


def reflect(incident, normal):
    """Mirror reflection: I - 2(I.N)N."""
    incident = np.asarray(incident, dtype=float)
    normal = np.asarray(normal, dtype=float)
    return incident - 2.0 * np.expand_dims(dot(incident, normal), -1) * normal


def refract(incident, normal, eta_t, eta_i=1.0):
    """
    Refraction direction by Snell's law.

    Args:
        incident: (3,) or (N, 3) unit incident directions
        normal: (3,) or (N, 3) outward surface normals
        eta_t: Refractive index of the medium on the inner side of the normal
        eta_i: Refractive index of the medium on the outer side of the normal

    Returns:
        Refracted directions (not normalized). Rays that leave the medium
        (I.N > 0) are refracted with the normal flipped and the indices
        swapped. Under total internal reflection the sentinel (1, 0, 0) is
        returned for that ray.
    """
    incident = np.asarray(incident, dtype=float)
    normal = np.asarray(normal, dtype=float)
    eta_t = np.asarray(eta_t, dtype=float)
    eta_i = np.asarray(eta_i, dtype=float)

    cosi = -np.clip(dot(incident, normal), -1.0, 1.0)

    # Exiting the medium: look at the surface from the inside
    exiting = cosi < 0
    cosi = np.where(exiting, -cosi, cosi)
    n = np.where(np.expand_dims(exiting, -1), -normal, normal)
    eta = np.where(exiting, eta_t / eta_i, eta_i / eta_t)

    k = 1.0 - eta**2 * (1.0 - cosi**2)
    tir = k < 0
    root = np.sqrt(np.where(tir, 0.0, k))

    refracted = (incident * np.expand_dims(eta, -1)
                 + n * np.expand_dims(eta * cosi - root, -1))
    return np.where(np.expand_dims(tir, -1), TIR_SENTINEL, refracted)


def offset_origin(points, normals, directions):
    """
    Move secondary ray origins off the surface.

    The origin is pushed SURFACE_OFFSET along the normal, to the side of the
    surface the new ray travels into, so the ray does not immediately hit
    the surface it starts on.
    """
    points = np.asarray(points, dtype=float)
    normals = np.asarray(normals, dtype=float)
    inward = dot(directions, normals) < 0
    offset = normals * constants.SURFACE_OFFSET
    return np.where(np.expand_dims(inward, -1), points - offset, points + offset)
